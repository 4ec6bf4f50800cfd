"""
Attendance Manager Module - QR Attendance Service

A student starts absent and becomes present the first time their page is
scanned. Marking is a single conditional write in the student store, so two
simultaneous scans of the same code cannot both succeed, and the first
timestamp is never overwritten.
"""

from datetime import datetime, timezone
import logging

from qr_attendance.modules.exceptions import AlreadyMarked


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2025-09-30T08:15:02.117Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class AttendanceManager:
    """Records attendance on top of the student store."""

    def __init__(self, student_manager, clock=utc_timestamp):
        """
        Args:
            student_manager: Student store instance
            clock: Callable returning the timestamp string to record
        """
        self.students = student_manager
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def mark_attendance(self, student_id: str) -> str:
        """
        Move a student from absent to present.

        Args:
            student_id (str): Student id from the scanned URL

        Returns:
            str: Timestamp recorded for the student

        Raises:
            NotFound: If no student has this id
            AlreadyMarked: If the student was already present
            StorageError: If the database fails
        """
        timestamp = self.clock()

        if not self.students.set_present(student_id, timestamp):
            self.logger.warning(f"Duplicate scan for student {student_id}")
            raise AlreadyMarked()

        self.logger.info(f"Attendance recorded: student {student_id} at {timestamp}")
        return timestamp
