"""Protocol constants and the decoded message value type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

MAX_DEVICE_ADDRESS = 63
MAX_UINT16 = 0xFFFF
CHECKSUM_MODULUS = 0x10000
RESPONSE_FLAG = 0x80


class CommandCode(IntEnum):
    """Request command identifiers."""

    READ = 2
    WRITE = 3


def response_code(command: int) -> int:
    """Return the command code a device answers *command* with."""
    return int(command) | RESPONSE_FLAG


@dataclass(frozen=True)
class Message:
    """A decoded, checksum-validated protocol frame."""

    device_address: int
    command: int
    register: int
    data: int

    def __repr__(self) -> str:
        return (
            f"Message(device_address={self.device_address}, "
            f"command=0x{self.command:02X}, register={self.register}, data={self.data})"
        )
