"""
HTTP routes for the QR attendance service.

Pages are static HTML files that call the JSON API. API failures are
reported as ``{"success": False, "message": ...}`` with HTTP 200; only the
Excel export answers with a 500 status when it fails.
"""

import io
import logging

from flask import Blueprint, Response, current_app, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from qr_attendance.modules.exceptions import AttendanceError, NotFound
from qr_attendance.modules.report_generator import XLSX_MIMETYPE

bp = Blueprint('attendance', __name__)
logger = logging.getLogger(__name__)


def _services():
    return current_app.extensions['qr_attendance']


def _failure(message):
    return jsonify({'success': False, 'message': message})


@bp.errorhandler(Exception)
def handle_unexpected_error(error):
    """Keep unexpected faults inside the JSON contract"""
    if isinstance(error, HTTPException):
        return error
    logger.exception(f"Unhandled error on {request.method} {request.path}")
    return _failure('An unexpected error occurred')


# Pages

@bp.route('/')
def index():
    """Landing page with the registration form"""
    return current_app.send_static_file('index.html')


@bp.route('/scanner')
def scanner():
    """Camera page that opens scanned student links"""
    return current_app.send_static_file('scanner.html')


@bp.route('/admin')
def admin():
    """Student list and export"""
    return current_app.send_static_file('admin.html')


@bp.route('/student/<path:student_id>')
def student_page(student_id):
    """Student page; the page itself loads the record and marks attendance"""
    return current_app.send_static_file('student.html')


# API

@bp.route('/api/register', methods=['POST'])
def register_student():
    """Register (or re-register) a student and return their QR code"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    name = data.get('name')
    if name is None or not str(name).strip():
        return _failure('Missing required field: name')
    email = data.get('email')

    services = _services()
    try:
        student_id = services.allocator.allocate(data.get('id'))
        services.students.upsert_student(
            student_id,
            str(name).strip(),
            str(email).strip() if email is not None else None
        )
        qr_data_url = services.qr_generator.issue(request.host_url, student_id)

    except AttendanceError as e:
        logger.error(f"Registration failed: {e.message}")
        return _failure(e.message)

    return jsonify({
        'success': True,
        'id': student_id,
        'qrDataUrl': qr_data_url
    })


@bp.route('/api/student/<path:student_id>')
def get_student(student_id):
    """Get one student's record"""
    try:
        student = _services().students.get_student(student_id)
    except AttendanceError as e:
        logger.error(f"Student lookup failed for {student_id}: {e.message}")
        return _failure(e.message)

    if student is None:
        return _failure(NotFound.default_message)

    return jsonify({'success': True, 'student': student.to_dict()})


@bp.route('/api/attendance/<path:student_id>', methods=['POST'])
def mark_attendance(student_id):
    """Mark a student present; only the first scan counts"""
    try:
        timestamp = _services().attendance.mark_attendance(student_id)
    except NotFound as e:
        logger.warning(f"Attendance scan for unknown student {student_id}")
        return _failure(e.message)
    except AttendanceError as e:
        return _failure(e.message)

    return jsonify({'success': True, 'timestamp': timestamp})


@bp.route('/api/students')
def list_students():
    """List every registered student"""
    try:
        students = _services().students.list_students()
    except AttendanceError as e:
        logger.error(f"Student listing failed: {e.message}")
        return _failure(e.message)

    return jsonify({
        'success': True,
        'students': [student.to_dict() for student in students]
    })


@bp.route('/api/export')
def export_attendance():
    """Download attendance as an Excel workbook"""
    try:
        workbook = _services().reports.export_attendance()
    except AttendanceError:
        return Response('Error exporting', status=500, mimetype='text/plain')

    return send_file(
        io.BytesIO(workbook),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=current_app.config['EXPORT_FILENAME']
    )
