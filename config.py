# QR Attendance Service Configuration

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).parent.absolute()

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


class Config:
    """Base configuration class"""

    # Server Configuration
    HOST = os.environ.get('HOST') or '0.0.0.0'
    PORT = int(os.environ.get('PORT') or 3000)

    # Database Configuration
    DATABASE_PATH = BASE_DIR / 'database' / 'attendance.db'
    DATABASE_TIMEOUT = 30.0

    # QR Code Configuration
    QR_CODE_SIZE = 10
    QR_CODE_BORDER = 4
    QR_CODE_ERROR_CORRECT = 'M'  # Medium error correction

    # Identity Configuration
    STUDENT_ID_PREFIX = 'ID'

    # Export Configuration
    EXPORT_FILENAME = 'attendance.xlsx'
    EXPORT_SHEET_NAME = 'Attendance'

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = BASE_DIR / 'logs' / 'attendance.log'
    LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
    LOG_BACKUP_COUNT = 5

    # Flask Configuration
    DEBUG = os.environ.get('DEBUG', 'False').lower() in ['true', 'on', '1']
    TESTING = False
    JSON_SORT_KEYS = False

    @classmethod
    def init_app(cls, app):
        """Initialize application configuration"""
        Path(app.config['DATABASE_PATH']).parent.mkdir(parents=True, exist_ok=True)

        app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True

    DATABASE_PATH = BASE_DIR / 'database' / 'attendance_dev.db'

    # More verbose logging
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True

    # Tests override this with a temporary file
    DATABASE_PATH = BASE_DIR / 'database' / 'attendance_test.db'
    DATABASE_TIMEOUT = 10.0

    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False

    DATABASE_PATH = BASE_DIR / 'database' / 'attendance.db'

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'WARNING'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)

        # Setup file logging
        if not app.debug:
            log_file = Path(app.config['LOG_FILE'])
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=app.config['LOG_MAX_BYTES'],
                backupCount=app.config['LOG_BACKUP_COUNT']
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.setLevel(logging.INFO)
            logging.getLogger('qr_attendance').addHandler(file_handler)
            app.logger.addHandler(file_handler)

            app.logger.info('QR Attendance Service startup')


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration class by name, falling back to FLASK_ENV"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')
    return config.get(config_name, DevelopmentConfig)
