"""Runtime configuration for fleetindex - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from fleetindex.utils.constants import DEFAULT_DB_FILE, ENV_PREFIX, STATE_DIR
from fleetindex.utils.logging import logger

DEFAULTS = {
    "paths": {
        "db": DEFAULT_DB_FILE,
        "ecs_dir": "",
    },
    "server": {
        "http": "",
    },
    "logging": {
        "level": "info",
        "enabled": True,
        "json": False,
    },
}

CONFIG_FILE = "config.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"expected one of {sorted(_TRUE | _FALSE)}")


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .fleetindex/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (FLEETINDEX_<SECTION>_<KEY>)
    2. .fleetindex/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / STATE_DIR.name / CONFIG_FILE
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and type(value) is type(cfg[section][key]):
                                cfg[section][key] = value
                            else:
                                logger.warning(
                                    "Ignoring config value {section}.{key}={value!r} from {path}",
                                    section=section,
                                    key=key,
                                    value=value,
                                    path=str(path),
                                )
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {path}: {err}", path=str(path), err=e)
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    default_value = cfg[section][key]
                    if isinstance(default_value, bool):
                        cfg[section][key] = _parse_bool(value)
                    elif isinstance(default_value, int):
                        cfg[section][key] = int(value)
                    else:
                        cfg[section][key] = value
                except ValueError as e:
                    logger.warning(
                        "Invalid value for environment variable {var}: {value!r} - {err}",
                        var=env_var,
                        value=value,
                        err=e,
                    )
                    logger.info("Using value: {value}", value=cfg[section][key])

    return cfg
