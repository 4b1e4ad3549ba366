import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Optional

from config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_logging(log_file_path: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure the service logger: rotating file (5MB x 5) plus console.
    Safe to call more than once; handlers are replaced, not duplicated.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)

    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    path = log_file_path or settings.LOG_FILE_PATH
    try:
        log_dir = os.path.dirname(path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)  # decisions and ignored ids go to the file
        logger.addHandler(file_handler)
    except OSError as e:
        logging.getLogger(__name__).warning(f"Error setting up file logger at {path}: {e}")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    logger.propagate = True
    logger.info("Logging configured successfully.")
    return logger
