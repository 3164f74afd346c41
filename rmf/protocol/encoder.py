"""Command validation and serialization.

A command travels as a single ASCII line::

    @<device address>,<command>,<register>,<value>,<checksum>\\r

All fields are unsigned decimal integers. The checksum is the 16-bit
wraparound sum of the four preceding fields. Reads carry a value of 0.
"""

from __future__ import annotations

from .message import CHECKSUM_MODULUS, MAX_DEVICE_ADDRESS, MAX_UINT16, CommandCode
from ..errors import ValidationError


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_address(address: object) -> int:
    """Return *address* if it is a valid device address (0-63)."""
    if not _is_int(address) or not 0 <= address <= MAX_DEVICE_ADDRESS:
        raise ValidationError("device address", address, 0, MAX_DEVICE_ADDRESS)
    return int(address)


def validate_uint16(value: object, name: str) -> int:
    """Return *value* if it fits an unsigned 16-bit field.

    Args:
        value: Candidate register number or register value.
        name: Parameter name reported in the error.
    """
    if not _is_int(value) or not 0 <= value <= MAX_UINT16:
        raise ValidationError(name, value, 0, MAX_UINT16)
    return int(value)


def compute_checksum(address: int, command: int, register: int, value: int) -> int:
    """Sum the four numeric fields modulo 65536."""
    return (address + command + register + value) % CHECKSUM_MODULUS


def encode_command(address: int, command: int, register: int, value: int) -> bytes:
    """Serialize an already validated command into its wire form."""
    checksum = compute_checksum(address, command, register, value)
    return f"@{address},{command},{register},{value},{checksum}\r".encode("ascii")


def encode_read(address: int, register: int) -> bytes:
    """Build a read-register command.

    Raises:
        ValidationError: If a parameter is out of range; nothing is encoded.
    """
    address = validate_address(address)
    register = validate_uint16(register, "register number")
    return encode_command(address, CommandCode.READ.value, register, 0)


def encode_write(address: int, register: int, value: int) -> bytes:
    """Build a write-register command.

    Raises:
        ValidationError: If a parameter is out of range; nothing is encoded.
    """
    address = validate_address(address)
    register = validate_uint16(register, "register number")
    value = validate_uint16(value, "register value")
    return encode_command(address, CommandCode.WRITE.value, register, value)
