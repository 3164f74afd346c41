"""Transport layer abstractions for the RMF master."""

from .base import ReceiveCallback, Transport
from .serial_transport import SerialTransport, list_ports

__all__ = [
    "ReceiveCallback",
    "SerialTransport",
    "Transport",
    "list_ports",
]
