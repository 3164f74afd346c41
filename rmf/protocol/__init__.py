"""Protocol layer: message type, command encoding and frame parsing."""

from .encoder import encode_read, encode_write
from .message import CommandCode, Message, response_code
from .parser import FrameParser

__all__ = [
    "CommandCode",
    "FrameParser",
    "Message",
    "encode_read",
    "encode_write",
    "response_code",
]
