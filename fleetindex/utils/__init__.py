"""fleetindex utilities package."""

from .constants import DEFAULT_DB_FILE, ERROR_LOG_FILE, STATE_DIR
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import configure_logging, logger

__all__ = [
    "DEFAULT_DB_FILE",
    "ERROR_LOG_FILE",
    "STATE_DIR",
    "ExitCodes",
    "configure_logging",
    "handle_exceptions",
    "logger",
]
