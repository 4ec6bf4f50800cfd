"""
Identity Allocator Module - QR Attendance Service

Produces the identifier a student is registered under. A caller-supplied id
is used as-is; otherwise an id is derived from the current time in
milliseconds ("ID1727712000123"). Ids are unique among those generated by
this process only; two processes sharing a database can still collide.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional


class IdentityAllocator:
    """Allocates student ids, preferring the one supplied by the caller."""

    def __init__(self, prefix: str = 'ID', clock: Callable[[], float] = time.time):
        self.prefix = prefix
        self._clock = clock
        self._lock = threading.Lock()
        self._last_issued = 0
        self.logger = logging.getLogger(__name__)

    def allocate(self, supplied_id: Optional[Any] = None) -> str:
        """
        Return the supplied id if it is non-empty, else a fresh generated id.

        Args:
            supplied_id: Id sent by the client, may be None or blank

        Returns:
            str: Student id to register under
        """
        if supplied_id is not None:
            supplied = str(supplied_id).strip()
            if supplied:
                return supplied

        with self._lock:
            millis = int(self._clock() * 1000)
            # Same millisecond (or clock went backwards): step past the last id
            if millis <= self._last_issued:
                millis = self._last_issued + 1
            self._last_issued = millis

        student_id = f"{self.prefix}{millis}"
        self.logger.debug(f"Allocated student id {student_id}")
        return student_id
