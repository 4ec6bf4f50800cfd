"""
Report Generator Module - QR Attendance Service

This module exports attendance to an Excel workbook. The export is a
snapshot of every registered student, one row each, written to a single
sheet and returned as bytes for download; nothing is written to disk.

Features:
- Flat attendance records (ID, Name, Email, Status, Timestamp)
- Excel (.xlsx) generation with pandas and openpyxl
- All-or-nothing export: any failure raises ExportError
"""

import pandas as pd
import io
from typing import Dict, List, Any
import logging

from qr_attendance.modules.exceptions import AttendanceError, ExportError

EXPORT_COLUMNS = ['ID', 'Name', 'Email', 'Status', 'Timestamp']
XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class ReportGenerator:
    """
    Attendance export built from the student store.
    """

    def __init__(self, student_manager, sheet_name: str = 'Attendance'):
        """
        Initialize the report generator.

        Args:
            student_manager: Student store instance
            sheet_name (str): Name of the worksheet holding the records
        """
        self.students = student_manager
        self.sheet_name = sheet_name
        self.logger = logging.getLogger(__name__)

    def build_records(self) -> List[Dict[str, Any]]:
        """
        Flatten every student into an export row.

        Returns:
            List[Dict[str, Any]]: Rows keyed by EXPORT_COLUMNS
        """
        return [
            {
                'ID': student.id,
                'Name': student.name,
                'Email': student.email,
                'Status': student.status,
                'Timestamp': student.timestamp or ''
            }
            for student in self.students.list_students()
        ]

    def export_attendance(self) -> bytes:
        """
        Generate the attendance workbook.

        Returns:
            bytes: Contents of an .xlsx file

        Raises:
            ExportError: If the snapshot or the workbook cannot be produced
        """
        try:
            records = self.build_records()

            df = pd.DataFrame(records, columns=EXPORT_COLUMNS)

            buffer = io.BytesIO()
            with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
                df.to_excel(writer, sheet_name=self.sheet_name, index=False)

            self.logger.info(f"Attendance export generated with {len(records)} record(s)")
            return buffer.getvalue()

        except AttendanceError as e:
            self.logger.error(f"Attendance export failed: {e.message}")
            raise ExportError() from e
        except Exception as e:
            self.logger.error(f"Excel report generation failed: {str(e)}")
            raise ExportError() from e
