"""Tests for attendance marking."""
import re
import threading

import pytest

from qr_attendance.modules.attendance_manager import AttendanceManager, utc_timestamp
from qr_attendance.modules.exceptions import AlreadyMarked, NotFound

ISO_TIMESTAMP = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$')


def test_utc_timestamp_format():
    assert ISO_TIMESTAMP.match(utc_timestamp())


def test_mark_records_timestamp(store, attendance):
    store.upsert_student('s1', 'Alice', 'a@x.com')

    timestamp = attendance.mark_attendance('s1')

    assert ISO_TIMESTAMP.match(timestamp)
    assert store.get_student('s1').attendance is True
    assert store.get_student('s1').timestamp == timestamp


def test_second_mark_is_rejected_and_keeps_first_timestamp(store):
    times = iter(['2025-09-30T08:00:00.000Z', '2025-09-30T08:05:00.000Z'])
    attendance = AttendanceManager(store, clock=lambda: next(times))
    store.upsert_student('s1', 'Alice', 'a@x.com')

    assert attendance.mark_attendance('s1') == '2025-09-30T08:00:00.000Z'
    with pytest.raises(AlreadyMarked) as excinfo:
        attendance.mark_attendance('s1')

    assert excinfo.value.message == 'Already marked present'
    assert store.get_student('s1').timestamp == '2025-09-30T08:00:00.000Z'


def test_mark_unknown_student(store, attendance):
    with pytest.raises(NotFound) as excinfo:
        attendance.mark_attendance('ghost')

    assert excinfo.value.message == 'Not found'
    assert store.list_students() == []


def test_concurrent_first_marks_only_one_succeeds(store, attendance):
    store.upsert_student('s1', 'Alice', 'a@x.com')
    workers = 16
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def scan():
        barrier.wait()
        try:
            outcome = attendance.mark_attendance('s1')
        except AlreadyMarked:
            outcome = 'already'
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=scan) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    successes = [o for o in outcomes if o != 'already']
    assert len(outcomes) == workers
    assert len(successes) == 1
    assert outcomes.count('already') == workers - 1
    assert store.get_student('s1').timestamp == successes[0]


def test_listing_reflects_marks(store, attendance):
    for student_id, name in (('A', 'Ann'), ('B', 'Ben'), ('C', 'Cid')):
        store.upsert_student(student_id, name, f'{name.lower()}@x.com')

    attendance.mark_attendance('B')

    statuses = {s.id: s.status for s in store.list_students()}
    assert statuses == {'A': 'Absent', 'B': 'Present', 'C': 'Absent'}
