"""Core functionality for CardGen."""

from .config import ConfigManager
from .constants import (
    APP_NAME,
    VERSION,
    __version__,
    __author__,
    __license__,
    __copyright__,
    DEFAULT_CHARACTER_SIZE,
)
from .logging_config import setup_logging, ErrorLogger

__all__ = [
    "ConfigManager",
    "APP_NAME",
    "VERSION",
    "__version__",
    "__author__",
    "__license__",
    "__copyright__",
    "DEFAULT_CHARACTER_SIZE",
    "setup_logging",
    "ErrorLogger",
]
