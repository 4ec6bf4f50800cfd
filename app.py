"""
QR Attendance Service - Main Application

Entry point for the QR code attendance service. It configures logging,
builds the Flask application, serves it and closes the database when the
server stops.

Features:
- Student registration with per-student QR codes
- Attendance marking by scanning a student's QR code (first scan wins)
- Student listing for the admin page
- Attendance export to Excel
"""

import logging

from config import LOG_FORMAT
from qr_attendance import create_app, close_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)

app = create_app()

if __name__ == '__main__':
    host = app.config['HOST']
    port = app.config['PORT']
    logger.info(f"Server running at http://localhost:{port}")

    try:
        app.run(debug=app.config['DEBUG'], host=host, port=port, threaded=True)
    finally:
        close_app(app)
        logger.info("Database connections closed")
