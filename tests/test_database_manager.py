"""Tests for database connection handling."""
import json
import threading

from qr_attendance.modules.database_manager import DatabaseManager


def run_in_new_thread(target):
    thread = threading.Thread(target=target)
    thread.start()
    thread.join()


def test_connections_of_exited_threads_are_closed(tmp_path):
    db_manager = DatabaseManager(tmp_path / 'threads.db', timeout=10.0)
    try:
        for _ in range(50):
            run_in_new_thread(lambda: db_manager.execute_query("SELECT COUNT(*) FROM students"))

        # One for the creating thread, one for the last worker not yet reaped
        assert db_manager.connection_count <= 2
    finally:
        db_manager.close_all_connections()

    assert db_manager.connection_count == 0


def test_release_connection_closes_thread_connection(db_manager):
    db_manager.execute_query("SELECT 1")
    assert db_manager.connection_count == 1

    db_manager.release_connection()
    assert db_manager.connection_count == 0

    # The next call opens a fresh connection
    assert db_manager.execute_query("SELECT 1 AS one", fetch_all=False) == {'one': 1}
    assert db_manager.connection_count == 1


def test_requests_on_short_lived_threads_do_not_accumulate_connections(app, client):
    client.post('/api/register', json={'id': 's1', 'name': 'Alice', 'email': 'a@x.com'})
    db_manager = app.extensions['qr_attendance'].db_manager
    before = db_manager.connection_count
    results = []

    def request_student():
        response = client.get('/api/student/s1')
        results.append(json.loads(response.data)['success'])

    for _ in range(300):
        run_in_new_thread(request_student)

    assert results == [True] * 300
    assert db_manager.connection_count <= before + 1
