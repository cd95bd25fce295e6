import logging
import sys
import os
from datetime import datetime
from .settings import settings


def setup_logging():
    """Setup structured logging for the application and scheduler scripts"""

    # Determine log level based on debug mode
    log_level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers = []

    # Console handler (always present)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    # File handler (only in production)
    if not settings.debug:
        log_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), '..', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, settings.log_file),
            maxBytes=50*1024*1024,  # 50MB per file
            backupCount=20
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    if not settings.debug:
        # Reduce noise from third-party libraries in production
        logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
        logging.getLogger('botocore').setLevel(logging.WARNING)

    logger = logging.getLogger('lawdesk')
    logger.info("Logging system initialized")

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance for a specific module"""
    if name:
        return logging.getLogger(f'lawdesk.{name}')
    return logging.getLogger('lawdesk')


def log_notification_event(operation: str, notification_id: str = None, user_id: str = None, details: str = None):
    """Log notification read-state changes made through the API"""
    logger = get_logger('notifications')
    log_data = {
        'operation': operation,
        'notification_id': notification_id,
        'user_id': user_id,
        'details': details,
        'timestamp': datetime.utcnow().isoformat()
    }
    logger.info(f"Notification Operation: {log_data}")


def log_api_request(method: str, path: str, user_id: str = None, status_code: int = None, duration_ms: float = None):
    """Log API requests"""
    logger = get_logger('api')
    log_data = {
        'method': method,
        'path': path,
        'user_id': user_id,
        'status_code': status_code,
        'duration_ms': duration_ms,
        'timestamp': datetime.utcnow().isoformat()
    }
    logger.info(f"API Request: {log_data}")
