"""Default tunables and logging setup for the RMF master."""

from __future__ import annotations

import logging

CONFIG_FILE = "rmf.json"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

DEFAULT_BAUDRATE = 9600
RESPONSE_TIMEOUT_MS = 200
MAX_MESSAGE_LENGTH = 200


def configure_logging(*, debug: bool = False, fmt: str = LOG_FORMAT) -> None:
    """Route package log records to stderr.

    Only warnings are shown unless *debug* is set, in which case frame traffic
    and request state changes are logged too. An application that already
    configured the root logger keeps its handlers; only the level of the
    ``rmf`` logger is adjusted.
    """

    level = logging.DEBUG if debug else logging.WARNING
    logging.getLogger("rmf").setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=fmt)
