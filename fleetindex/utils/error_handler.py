"""Command error handling: log, record in .fleetindex/error.log, report through click."""

import json
import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from fleetindex.indexer.exceptions import FleetIndexError
from fleetindex.utils.logging import logger

from .constants import ERROR_LOG_FILE, STATE_DIR


def _append_error_log(command: str, e: Exception, details: dict) -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write("=" * 80 + "\n")
        f.write(f"[{datetime.now().isoformat()}] fleetindex {command}\n")
        f.write(f"{type(e).__name__}: {e}\n")
        if details:
            f.write(f"details: {json.dumps(details, default=str)}\n")
        f.write("\n" + traceback.format_exc() + "\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn an unexpected error in a command into a ClickException.

    click's own exceptions and exits pass through untouched.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            details = e.details if isinstance(e, FleetIndexError) else {}
            command = func.__name__

            logger.opt(exception=True).error("Command {cmd} failed: {err}", cmd=command, err=str(e), **details)
            _append_error_log(command, e, details)

            raise click.ClickException(
                f"{type(e).__name__}: {e}\n\nFull traceback logged to: {ERROR_LOG_FILE}"
            ) from e

    return wrapper
