"""Master-side engine for the RMF serial register access protocol."""

from __future__ import annotations

from .client import RmfMaster
from .config import RmfConfig, load_config, save_config
from .errors import (
    ChecksumError,
    ProtocolMismatchError,
    RequestInProgressError,
    RequestTimeoutError,
    RmfError,
    TransportError,
    ValidationError,
)
from .protocol import CommandCode, FrameParser, Message

__all__ = [
    "ChecksumError",
    "CommandCode",
    "FrameParser",
    "Message",
    "ProtocolMismatchError",
    "RequestInProgressError",
    "RequestTimeoutError",
    "RmfConfig",
    "RmfError",
    "RmfMaster",
    "TransportError",
    "ValidationError",
    "load_config",
    "save_config",
    "main",
]


def main() -> int:
    """Run the ``rmf`` command line tool."""

    from .cli import main as _cli_main

    return _cli_main()
