"""Shared fixtures for the attendance service tests."""
import pytest

from qr_attendance import create_app, close_app
from qr_attendance.modules.database_manager import DatabaseManager
from qr_attendance.modules.student_manager import StudentManager
from qr_attendance.modules.attendance_manager import AttendanceManager


@pytest.fixture
def app(tmp_path):
    """Create test app backed by a temporary database file."""
    app = create_app('testing', DATABASE_PATH=tmp_path / 'attendance.db')
    yield app
    close_app(app)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(tmp_path / 'store.db', timeout=10.0)
    yield manager
    manager.close_all_connections()


@pytest.fixture
def store(db_manager):
    return StudentManager(db_manager)


@pytest.fixture
def attendance(store):
    return AttendanceManager(store)
