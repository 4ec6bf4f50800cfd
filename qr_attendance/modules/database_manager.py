"""
Database Manager Module - QR Attendance Service

This module owns the SQLite database file used by the attendance service.
It manages per-thread connections, creates the ``students`` table and
provides the small query/update/transaction helpers the student store is
built on. Every sqlite3 failure leaves this module as a ``StorageError``.

Features:
- Thread-local SQLite connection management
- Idempotent schema creation
- Query and update helpers returning plain dictionaries
- Transaction support with rollback on error
- Per-request release and cleanup of connections owned by exited threads
- Explicit shutdown closing every connection opened by the process
"""

import sqlite3
import logging
from contextlib import contextmanager
import threading
import os

from qr_attendance.modules.exceptions import StorageError


class DatabaseManager:
    """
    Connection and schema management for the attendance database.
    One instance is created by the application factory and shared by every
    component that needs the database.
    """

    def __init__(self, db_path, timeout=30.0):
        """
        Initialize the database manager with the specified database path.

        Args:
            db_path (str): Path to the SQLite database file
            timeout (float): Seconds a writer waits on a locked database
        """
        self.db_path = str(db_path)
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._local = threading.local()
        # Owning thread -> its open connection
        self._connections = {}
        self._connections_lock = threading.Lock()

        # Ensure database directory exists
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.initialize_database()

    def _connect(self):
        connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=self.timeout
        )
        connection.row_factory = sqlite3.Row
        # WAL lets readers proceed while a scan is being recorded
        connection.execute("PRAGMA journal_mode = WAL")
        connection.execute("PRAGMA synchronous = NORMAL")

        with self._connections_lock:
            self._close_dead_thread_connections()
            self._connections[threading.current_thread()] = connection
        return connection

    def _close_dead_thread_connections(self):
        """Close connections left behind by threads that have exited. Caller holds the lock."""
        for thread in [t for t in self._connections if not t.is_alive()]:
            connection = self._connections.pop(thread)
            try:
                connection.close()
            except sqlite3.Error as e:
                self.logger.error(f"Error closing connection of {thread.name}: {str(e)}")

    @property
    def connection_count(self):
        """Number of connections currently held open by this manager."""
        with self._connections_lock:
            return len(self._connections)

    @contextmanager
    def get_connection(self):
        """
        Context manager yielding this thread's connection.
        The connection stays open for reuse within the thread until
        ``release_connection`` runs, the thread exits, or
        ``close_all_connections`` is called.

        Yields:
            sqlite3.Connection: Database connection object

        Raises:
            StorageError: If the connection or an operation on it fails
        """
        try:
            if getattr(self._local, 'connection', None) is None:
                self._local.connection = self._connect()
        except sqlite3.Error as e:
            self.logger.error(f"Could not open database {self.db_path}: {str(e)}")
            raise StorageError(str(e)) from e

        connection = self._local.connection
        try:
            yield connection
        except sqlite3.Error as e:
            connection.rollback()
            self.logger.error(f"Database operation failed: {str(e)}")
            raise StorageError(str(e)) from e
        except Exception:
            connection.rollback()
            raise

    def initialize_database(self):
        """
        Create the students table. Safe to call repeatedly.
        """
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS students (
                    id TEXT PRIMARY KEY,
                    name TEXT,
                    email TEXT,
                    attendance INTEGER NOT NULL DEFAULT 0,
                    timestamp TEXT,
                    CHECK ((attendance = 0 AND timestamp IS NULL)
                        OR (attendance = 1 AND timestamp IS NOT NULL))
                )
            """)
            conn.commit()

        self.logger.info(f"Database initialized at {self.db_path}")

    def execute_query(self, query, params=None, fetch_all=True):
        """
        Execute a SELECT query and return results.

        Args:
            query (str): SQL query string
            params (tuple): Query parameters
            fetch_all (bool): Whether to fetch all results or just one

        Returns:
            list or dict: Query results
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())

            if fetch_all:
                return [dict(row) for row in cursor.fetchall()]

            result = cursor.fetchone()
            return dict(result) if result else None

    def execute_update(self, query, params=None):
        """
        Execute an INSERT or UPDATE statement and commit it.

        Args:
            query (str): SQL query string
            params (tuple): Query parameters

        Returns:
            int: Number of affected rows
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            conn.commit()
            return cursor.rowcount

    @contextmanager
    def transaction(self, immediate=False):
        """
        Context manager for database transactions with automatic rollback on error.

        Args:
            immediate (bool): Take the write lock up front (BEGIN IMMEDIATE)

        Yields:
            sqlite3.Connection: Database connection within transaction
        """
        with self.get_connection() as conn:
            if immediate and not conn.in_transaction:
                conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.commit()
            except Exception as e:
                conn.rollback()
                self.logger.error(f"Transaction rolled back: {str(e)}")
                raise

    def release_connection(self):
        """
        Close the calling thread's connection, if it has one.
        The next database call on this thread opens a fresh connection.
        """
        connection = getattr(self._local, 'connection', None)
        if connection is None:
            return

        self._local.connection = None
        with self._connections_lock:
            self._connections.pop(threading.current_thread(), None)

        try:
            connection.close()
        except sqlite3.Error as e:
            self.logger.error(f"Error closing connection: {str(e)}")

    def close_all_connections(self):
        """Close every connection opened by this manager, across all threads."""
        with self._connections_lock:
            connections, self._connections = list(self._connections.values()), {}

        for connection in connections:
            try:
                connection.close()
            except sqlite3.Error as e:
                self.logger.error(f"Error closing connection: {str(e)}")

        self._local = threading.local()
        self.logger.info(f"Closed {len(connections)} database connection(s)")
