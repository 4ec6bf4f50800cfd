"""
Student Manager Module - QR Attendance Service

This module is the student store: the only code that reads or writes rows
of the ``students`` table. Other components go through it.

Features:
- Register-or-replace (upsert) of student rows
- Lookup by student id
- Atomic absent -> present transition
- Listing in registration order
- Headcount for status logging
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, List, Any, Optional
import logging

from qr_attendance.modules.exceptions import NotFound


@dataclass
class StudentRecord:
    """Data structure for one row of the students table."""
    id: str
    name: Optional[str]
    email: Optional[str]
    attendance: bool
    timestamp: Optional[str]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'StudentRecord':
        return cls(
            id=row['id'],
            name=row['name'],
            email=row['email'],
            attendance=bool(row['attendance']),
            timestamp=row['timestamp']
        )

    @property
    def status(self) -> str:
        return 'Present' if self.attendance else 'Absent'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UpsertResult(Enum):
    """Which branch of a register-or-replace write was taken."""
    CREATED = 'created'
    REPLACED = 'replaced'


class StudentManager:
    """
    Student store backed by the shared database manager.
    All methods raise StorageError when the database fails.
    """

    def __init__(self, database_manager):
        """
        Initialize the student store with database connection.

        Args:
            database_manager: Database manager instance
        """
        self.db = database_manager
        self.logger = logging.getLogger(__name__)

    def upsert_student(self, student_id: str, name: Optional[str],
                       email: Optional[str]) -> UpsertResult:
        """
        Create the student, or fully replace an existing row with the same id.
        A replaced row is reset to absent with no timestamp but keeps its
        position in the listing.

        Args:
            student_id (str): Student id
            name (str): Display name
            email (str): Contact email

        Returns:
            UpsertResult: CREATED for a new id, REPLACED otherwise
        """
        with self.db.transaction(immediate=True) as conn:
            existing = conn.execute(
                "SELECT 1 FROM students WHERE id = ?", (student_id,)
            ).fetchone()

            conn.execute(
                """INSERT INTO students (id, name, email, attendance, timestamp)
                   VALUES (?, ?, ?, 0, NULL)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       email = excluded.email,
                       attendance = 0,
                       timestamp = NULL""",
                (student_id, name, email)
            )

        result = UpsertResult.REPLACED if existing else UpsertResult.CREATED
        self.logger.info(f"Student {student_id} {result.value}")
        return result

    def get_student(self, student_id: str) -> Optional[StudentRecord]:
        """
        Get a student by id.

        Args:
            student_id (str): Student id

        Returns:
            StudentRecord: Student row or None if unknown
        """
        row = self.db.execute_query(
            "SELECT id, name, email, attendance, timestamp FROM students WHERE id = ?",
            (student_id,),
            fetch_all=False
        )
        return StudentRecord.from_row(row) if row else None

    def set_present(self, student_id: str, timestamp: str) -> bool:
        """
        Mark a student present in one conditional statement, so only the first
        of several concurrent callers changes the row.

        Args:
            student_id (str): Student id
            timestamp (str): Time the attendance was recorded

        Returns:
            bool: True if this call made the transition, False if the student
                  was already present

        Raises:
            NotFound: If the student does not exist
        """
        updated = self.db.execute_update(
            """UPDATE students SET attendance = 1, timestamp = ?
               WHERE id = ? AND attendance = 0""",
            (timestamp, student_id)
        )
        if updated:
            return True

        if self.get_student(student_id) is None:
            raise NotFound()
        return False

    def list_students(self) -> List[StudentRecord]:
        """Get every student in registration order."""
        rows = self.db.execute_query(
            "SELECT id, name, email, attendance, timestamp FROM students ORDER BY rowid"
        )
        return [StudentRecord.from_row(row) for row in rows]

    def get_student_count(self) -> Dict[str, int]:
        """
        Count registered and present students.

        Returns:
            Dict[str, int]: ``total`` and ``present`` counts
        """
        row = self.db.execute_query(
            """SELECT COUNT(*) AS total,
                      COALESCE(SUM(attendance), 0) AS present
               FROM students""",
            fetch_all=False
        )
        return {'total': row['total'], 'present': row['present']}
