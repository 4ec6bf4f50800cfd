# QR Attendance Service - App Package
"""
Application package for the QR code attendance service.
``create_app`` builds the Flask application and wires every component to a
single database manager owned by the caller.
"""

from dataclasses import dataclass
import logging

from flask import Flask, jsonify

from .modules.database_manager import DatabaseManager
from .modules.identity_allocator import IdentityAllocator
from .modules.qr_generator import QRGenerator
from .modules.student_manager import StudentManager
from .modules.attendance_manager import AttendanceManager
from .modules.report_generator import ReportGenerator

__version__ = "1.0.0"
__description__ = "Student attendance tracking with per-student QR codes"

EXTENSION_KEY = 'qr_attendance'


@dataclass
class AttendanceServices:
    """Components shared by the route handlers of one application."""
    db_manager: DatabaseManager
    students: StudentManager
    allocator: IdentityAllocator
    qr_generator: QRGenerator
    attendance: AttendanceManager
    reports: ReportGenerator


def create_app(config_name: str = None, **overrides) -> Flask:
    """
    Application factory.

    Args:
        config_name (str): Key into ``config.config``; defaults to FLASK_ENV
        **overrides: Individual config values, e.g. DATABASE_PATH in tests

    Returns:
        Flask: Configured application. Call ``close_app`` on shutdown.
    """
    from config import get_config

    app = Flask(__name__, static_folder='static')

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config.update(overrides)
    config_class.init_app(app)
    app.json.sort_keys = app.config['JSON_SORT_KEYS']

    db_manager = DatabaseManager(
        app.config['DATABASE_PATH'],
        timeout=app.config['DATABASE_TIMEOUT']
    )
    students = StudentManager(db_manager)
    app.extensions[EXTENSION_KEY] = AttendanceServices(
        db_manager=db_manager,
        students=students,
        allocator=IdentityAllocator(prefix=app.config['STUDENT_ID_PREFIX']),
        qr_generator=QRGenerator({
            'box_size': app.config['QR_CODE_SIZE'],
            'border': app.config['QR_CODE_BORDER'],
            'error_correction': app.config['QR_CODE_ERROR_CORRECT']
        }),
        attendance=AttendanceManager(students),
        reports=ReportGenerator(students, sheet_name=app.config['EXPORT_SHEET_NAME'])
    )

    from .routes import bp
    app.register_blueprint(bp)

    @app.teardown_appcontext
    def release_db_connection(exception=None):
        db_manager.release_connection()

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'QR Attendance Service',
            'version': __version__
        })

    counts = students.get_student_count()
    logging.getLogger(__name__).info(
        f"Attendance service ready: {counts['total']} student(s), {counts['present']} present"
    )
    return app


def close_app(app: Flask) -> None:
    """Release the database connections held by an application."""
    services = app.extensions.get(EXTENSION_KEY)
    if services is not None:
        services.db_manager.close_all_connections()


__all__ = [
    'create_app',
    'close_app',
    'AttendanceServices',
    'DatabaseManager',
    'IdentityAllocator',
    'QRGenerator',
    'StudentManager',
    'AttendanceManager',
    'ReportGenerator'
]
