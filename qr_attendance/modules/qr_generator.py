"""
QR Code Generator Module - QR Attendance Service

This module turns a student id into a scannable QR code. The code encodes
the URL of the student's page (``<base_url>/student/<id>``); opening that
page is what marks the student present. Images are returned as PNG data
URLs so the browser can show them without another request.

Features:
- Student page URL construction
- QR code generation with configurable size, border and error correction
- PNG rendering and base64 data URL encoding
"""

import qrcode
from qrcode.exceptions import DataOverflowError
import io
import base64
import logging
from urllib.parse import quote
from typing import Optional, Dict, Any

from qr_attendance.modules.exceptions import EncodingError


ERROR_CORRECTION_LEVELS = {
    'L': qrcode.constants.ERROR_CORRECT_L,  # ~7% error correction
    'M': qrcode.constants.ERROR_CORRECT_M,  # ~15% error correction
    'Q': qrcode.constants.ERROR_CORRECT_Q,  # ~25% error correction
    'H': qrcode.constants.ERROR_CORRECT_H   # ~30% error correction
}


class QRGenerator:
    """
    QR code issuer for student pages.
    Handles URL building, image rendering and data URL encoding.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize the QR code generator.

        Args:
            settings (dict): Overrides for box_size, border, error_correction
                             (a level letter) and the fill/back colors
        """
        self.logger = logging.getLogger(__name__)

        self.settings = {
            'version': None,  # Let qrcode pick the smallest fitting version
            'error_correction': 'M',
            'box_size': 10,  # Size of each box in pixels
            'border': 4,    # Size of the border (minimum is 4)
            'fill_color': 'black',
            'back_color': 'white'
        }
        if settings:
            self.settings.update(settings)

    @staticmethod
    def build_student_url(base_url: str, student_id: str) -> str:
        """
        Build the URL a student's QR code points to.

        Args:
            base_url (str): Scheme and host the service is reached on
            student_id (str): Student id

        Returns:
            str: ``<base_url>/student/<id>`` with the id percent-encoded
        """
        return f"{base_url.rstrip('/')}/student/{quote(str(student_id), safe='')}"

    def render_png(self, data: str) -> bytes:
        """
        Render arbitrary text as a PNG QR code.

        Args:
            data (str): Text to encode

        Returns:
            bytes: PNG image

        Raises:
            EncodingError: If the data does not fit in a QR code
        """
        level = self.settings['error_correction']
        try:
            qr = qrcode.QRCode(
                version=self.settings['version'],
                error_correction=ERROR_CORRECTION_LEVELS.get(level, level),
                box_size=self.settings['box_size'],
                border=self.settings['border']
            )
            qr.add_data(data)
            qr.make(fit=True)

            img = qr.make_image(
                fill_color=self.settings['fill_color'],
                back_color=self.settings['back_color']
            )

            buffer = io.BytesIO()
            img.save(buffer, format='PNG')
            return buffer.getvalue()

        except DataOverflowError as e:
            self.logger.error(f"QR data too long ({len(data)} chars): {str(e)}")
            raise EncodingError('Data too long for a QR code') from e
        except (ValueError, OSError) as e:
            self.logger.error(f"QR code generation failed: {str(e)}")
            raise EncodingError(str(e)) from e

    def issue(self, base_url: str, student_id: str) -> str:
        """
        Generate the QR code for a student's page as a data URL.

        Args:
            base_url (str): Scheme and host the service is reached on
            student_id (str): Student id

        Returns:
            str: ``data:image/png;base64,...``
        """
        target_url = self.build_student_url(base_url, student_id)
        png = self.render_png(target_url)
        img_base64 = base64.b64encode(png).decode('ascii')

        self.logger.info(f"QR code generated for student {student_id} -> {target_url}")
        return f"data:image/png;base64,{img_base64}"
