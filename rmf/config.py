"""Persistent settings for the RMF master.

Settings live in a small JSON object. Unknown keys are ignored; numeric
values given as strings are accepted. A missing or unreadable file never
aborts start-up: the defaults are used and the problem is logged.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

from .settings import (
    CONFIG_FILE,
    DEFAULT_BAUDRATE,
    MAX_MESSAGE_LENGTH,
    RESPONSE_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

# Smallest accepted value for each numeric setting; lower values are raised to it.
_MINIMUMS: Dict[str, int] = {
    "baudrate": 1,
    "timeout_ms": 1,
    "max_message_length": 1,
}


@dataclass
class RmfConfig:
    port: str = ""
    baudrate: int = DEFAULT_BAUDRATE
    timeout_ms: int = RESPONSE_TIMEOUT_MS
    max_message_length: int = MAX_MESSAGE_LENGTH


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, str):
        return str(value)
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s value %r", name, value)
        return default
    return max(_MINIMUMS.get(name, number), number)


def load_config(path: str | Path = CONFIG_FILE) -> RmfConfig:
    """Read settings from *path*, falling back to defaults field by field."""

    cfg_path = Path(path)
    if not cfg_path.exists():
        return RmfConfig()

    try:
        raw = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not load config file %s: %s", cfg_path, exc)
        return RmfConfig()
    if not isinstance(raw, dict):
        logger.error("Config file %s did not contain an object", cfg_path)
        return RmfConfig()

    defaults = RmfConfig()
    values = {}
    for field in fields(RmfConfig):
        default = getattr(defaults, field.name)
        if field.name in raw:
            values[field.name] = _coerce(field.name, raw[field.name], default)
    return RmfConfig(**values)


def save_config(config: RmfConfig, path: str | Path = CONFIG_FILE) -> bool:
    """Write *config* to *path* as JSON; return whether the write succeeded."""

    cfg_path = Path(path)
    try:
        cfg_path.parent.mkdir(parents=True, exist_ok=True)
        cfg_path.write_text(json.dumps(asdict(config), indent=4), encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write config file %s: %s", cfg_path, exc)
        return False
    logger.info("Saved settings to %s", cfg_path)
    return True
