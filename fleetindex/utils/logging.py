"""Centralized logging configuration using Loguru with Pino-compatible output.

Usage:
    from fleetindex.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if FLEETINDEX_LOG_LEVEL=DEBUG

Environment Variables:
    FLEETINDEX_LOG_LEVEL: debug|info|warn|error (default: info; unknown values fall back to info)
    FLEETINDEX_LOG_JSON: 0|1 (default: 0, human-readable)
    FLEETINDEX_LOG_FILE: path to log file (optional)

All console output goes to stderr. stdout is reserved for the MCP stdio
transport.
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

from .constants import ENV_LOG_FILE, ENV_LOG_JSON, ENV_LOG_LEVEL

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

# Accept the short spellings used by --log-level
LEVEL_ALIASES = {
    "warn": "WARNING",
    "err": "ERROR",
}

_log_level = "INFO"
_json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"
_log_file = os.environ.get(ENV_LOG_FILE)
_request_id = str(uuid.uuid4())


def _pino_record(record) -> dict:
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key not in ("request_id",):
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return pino_log


def pino_compatible_sink(message):
    """Format log records as Pino-compatible NDJSON on stderr.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stderr.write(json.dumps(_pino_record(message.record), default=str) + "\n")
    sys.stderr.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

_console_handler_id: int | None = None
_file_handler_id: int | None = None


def normalize_level(level: str) -> str:
    """Map a user supplied level name onto a loguru level name."""
    name = level.strip()
    upper = LEVEL_ALIASES.get(name.lower(), name.upper())
    if upper not in PINO_LEVELS:
        raise ValueError(f"unknown log level {level!r} (expected debug, info, warn or error)")
    return upper


def configure_logging(level: str | None = None, enabled: bool = True, json_mode: bool | None = None) -> None:
    """(Re)install the console handler.

    Args:
        level: Minimum level (debug, info, warn, error); defaults to FLEETINDEX_LOG_LEVEL
        enabled: False removes console output entirely (--no-log)
        json_mode: Force NDJSON output; defaults to FLEETINDEX_LOG_JSON
    """
    global _console_handler_id, _log_level, _json_mode

    if level is not None:
        _log_level = normalize_level(level)
    if json_mode is not None:
        _json_mode = json_mode

    if _console_handler_id is not None:
        logger.remove(_console_handler_id)
        _console_handler_id = None

    if not enabled:
        return

    if _json_mode:
        _console_handler_id = logger.add(pino_compatible_sink, level=_log_level, colorize=False)
    else:
        _console_handler_id = logger.add(
            sys.stderr,
            level=_log_level,
            format=_human_format,
            colorize=None,  # Auto-detect: colors if TTY, plain if piped
        )


def configure_file_logging(log_file: Path, level: str = "DEBUG") -> None:
    """Append NDJSON records to log_file (always machine readable)."""
    global _file_handler_id

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    def _file_pino_sink(message):
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(message.record), default=str) + "\n")

    if _file_handler_id is not None:
        logger.remove(_file_handler_id)
    _file_handler_id = logger.add(_file_pino_sink, level=normalize_level(level))


def level_from_env(value: str | None) -> str:
    """Level named by FLEETINDEX_LOG_LEVEL; INFO when unset or unknown."""
    if not value:
        return "INFO"
    try:
        return normalize_level(value)
    except ValueError as e:
        # logger has no handler yet
        sys.stderr.write(f"[WARNING] Ignoring {ENV_LOG_LEVEL}: {e}; using INFO\n")
        return "INFO"


_log_level = level_from_env(os.environ.get(ENV_LOG_LEVEL))
configure_logging()
if _log_file:
    configure_file_logging(Path(_log_file))


__all__ = [
    "logger",
    "configure_logging",
    "configure_file_logging",
    "normalize_level",
    "level_from_env",
]
