"""
Centralized logging configuration for CardCanvas.
Logs to the console and to a rotating file for debugging and error reporting.
"""

import logging
import logging.handlers
import platform
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import get_user_data_dir, VERSION


def get_log_dir() -> Path:
    """Get the directory where log files are written."""
    return get_user_data_dir() / "logs"


def setup_logging(log_level=logging.INFO, log_to_file=True) -> Optional[Path]:
    """
    Set up logging for the entire application.

    Args:
        log_level: Minimum level to log (default: INFO)
        log_to_file: Whether to also log to file (default: True)

    Returns:
        Path to log file if logging to file, None otherwise
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    # Console handler (simple format for user)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(max(log_level, logging.WARNING))
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if not log_to_file:
        return None

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"cardcanvas_{timestamp}.log"

    # File handler (detailed format for debugging)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(file_handler)

    root_logger.info("=" * 60)
    root_logger.info(f"CardCanvas {VERSION} started")
    root_logger.info(f"Python: {sys.version}")
    root_logger.info(f"Platform: {platform.platform()}")
    root_logger.info(f"Log file: {log_file}")
    root_logger.info("=" * 60)

    # Capture Python warnings to the log file
    logging.captureWarnings(True)

    return log_file


class ErrorLogger:
    """Context manager for logging exceptions with additional context"""

    def __init__(self, operation_name, logger=None, reraise=True):
        """
        Args:
            operation_name: Description of the operation being performed
            logger: Logger instance to use (default: root logger)
            reraise: Whether to re-raise the exception after logging
        """
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger()
        self.reraise = reraise
        self.error: Optional[BaseException] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.error = exc_val
            self.logger.error(
                f"Error during {self.operation_name}: {exc_type.__name__}: {exc_val}",
                exc_info=True
            )
            if not self.reraise:
                return True  # Suppress exception
        return False
