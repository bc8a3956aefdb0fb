"""
Centralized logging configuration for CardGen.
Logs warnings to the console and, optionally, everything to a rotating file.
"""

import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import APP_NAME


def get_log_dir() -> Path:
    """Return the platform-specific log directory (not created)."""
    system = platform.system()
    if system == "Windows":
        return Path(os.environ.get('APPDATA', '')) / APP_NAME / 'logs'
    elif system == "Darwin":  # macOS
        return Path.home() / 'Library' / 'Application Support' / APP_NAME / 'logs'
    else:  # Linux
        return Path.home() / '.config' / APP_NAME / 'logs'


def setup_logging(log_level=logging.INFO, log_to_file=False) -> Optional[Path]:
    """
    Set up logging for the whole application.

    Args:
        log_level: Minimum level to log (default: INFO)
        log_to_file: Whether to also log to a rotating file (default: False)

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
    simple_formatter = logging.Formatter('%(levelname)s - %(message)s')

    # Console handler (simple format; stdout is reserved for CLI messages)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(min(log_level, logging.WARNING))
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    # Capture Python warnings
    logging.captureWarnings(True)

    if not log_to_file:
        return None

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"cardgen_{timestamp}.log"

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
    root_logger.info(f"{APP_NAME} Started")
    root_logger.info(f"Python: {sys.executable}")
    root_logger.info(f"Platform: {platform.platform()}")
    root_logger.info(f"Log file: {log_file}")
    root_logger.info("=" * 60)

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

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error(
                f"Error during {self.operation_name}: {exc_type.__name__}: {exc_val}",
                exc_info=self.logger.isEnabledFor(logging.DEBUG)
            )
            if not self.reraise:
                return True  # Suppress exception
        return False
