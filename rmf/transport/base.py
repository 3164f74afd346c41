"""Byte transport contract used by the RMF master."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

ReceiveCallback = Callable[[bytes], None]


class Transport(ABC):
    """Carries raw bytes to and from the device bus.

    Outgoing bytes go through :meth:`send`. Incoming bytes are pushed to a
    single receiver installed with :meth:`set_receiver`; implementations
    call :meth:`deliver` from the thread running the event loop.
    """

    def __init__(self) -> None:
        self._receiver: Optional[ReceiveCallback] = None

    def set_receiver(self, callback: Optional[ReceiveCallback]) -> None:
        self._receiver = callback

    def deliver(self, data: bytes) -> None:
        receiver = self._receiver
        if receiver is None or not data:
            return
        receiver(data)

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Transmit *data* to the bus."""
