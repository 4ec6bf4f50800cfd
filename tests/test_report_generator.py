"""Tests for the Excel attendance export."""
import io

import pytest
from openpyxl import load_workbook

from qr_attendance.modules.exceptions import ExportError, StorageError
from qr_attendance.modules.report_generator import EXPORT_COLUMNS, ReportGenerator


def read_sheet(data):
    workbook = load_workbook(io.BytesIO(data))
    return workbook.sheetnames, [list(row) for row in workbook['Attendance'].iter_rows(values_only=True)]


def test_build_records(store):
    store.upsert_student('s1', 'Alice', 'a@x.com')
    store.upsert_student('s2', 'Bob', 'b@x.com')
    store.set_present('s2', '2025-09-30T08:00:00.000Z')

    records = ReportGenerator(store).build_records()

    assert records == [
        {'ID': 's1', 'Name': 'Alice', 'Email': 'a@x.com', 'Status': 'Absent', 'Timestamp': ''},
        {'ID': 's2', 'Name': 'Bob', 'Email': 'b@x.com', 'Status': 'Present',
         'Timestamp': '2025-09-30T08:00:00.000Z'}
    ]


def test_export_writes_one_row_per_student(store):
    store.upsert_student('s1', 'Alice', 'a@x.com')
    store.upsert_student('s2', 'Bob', 'b@x.com')
    store.set_present('s2', '2025-09-30T08:00:00.000Z')

    sheetnames, rows = read_sheet(ReportGenerator(store).export_attendance())

    assert sheetnames == ['Attendance']
    assert rows[0] == EXPORT_COLUMNS
    assert rows[1][:4] == ['s1', 'Alice', 'a@x.com', 'Absent']
    # openpyxl reads an empty cell back as None
    assert rows[1][4] in ('', None)
    assert rows[2] == ['s2', 'Bob', 'b@x.com', 'Present', '2025-09-30T08:00:00.000Z']
    assert len(rows) == 3


def test_export_empty_store_has_header_only(store):
    _, rows = read_sheet(ReportGenerator(store).export_attendance())

    assert rows == [EXPORT_COLUMNS]


def test_export_failure_raises_export_error(store, monkeypatch):
    def broken():
        raise StorageError('disk I/O error')

    monkeypatch.setattr(store, 'list_students', broken)

    with pytest.raises(ExportError):
        ReportGenerator(store).export_attendance()
