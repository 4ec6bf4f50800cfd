"""
Exceptions Module - QR Attendance Service

Error taxonomy shared by the store, the QR issuer, the attendance gate and
the report exporter. The route layer catches these and turns them into
``{"success": False, "message": ...}`` payloads.
"""


class AttendanceError(Exception):
    """Base class for all domain errors raised by the attendance modules."""

    default_message = 'Attendance service error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AttendanceError):
    """Raised when no student row exists for the requested id."""

    default_message = 'Not found'


class AlreadyMarked(AttendanceError):
    """Raised when attendance is marked for a student who is already present."""

    default_message = 'Already marked present'


class StorageError(AttendanceError):
    """Raised when the underlying SQLite database fails."""

    default_message = 'Database operation failed'


class EncodingError(AttendanceError):
    """Raised when a QR code image cannot be produced."""

    default_message = 'QR code generation failed'


class ExportError(AttendanceError):
    """Raised when the attendance workbook cannot be built."""

    default_message = 'Error exporting'
