"""Register access facade composing the parser, encoder and coordinator."""

from __future__ import annotations

import logging
from typing import Optional

from .config import RmfConfig
from .coordinator import RequestCoordinator
from .errors import ProtocolMismatchError
from .protocol.encoder import encode_read, encode_write
from .protocol.message import CommandCode, response_code
from .protocol.parser import ErrorCallback, FrameParser, MessageCallback
from .transport.base import Transport

__all__ = ["RmfMaster"]

logger = logging.getLogger(__name__)


class RmfMaster:
    """Reads and writes device registers over an injected transport.

    Only one request may be in flight at a time; a second call made while
    one is waiting fails with :class:`~rmf.errors.RequestInProgressError`.
    Every decoded message and parser error is also forwarded to observers
    registered here, whether or not a request is waiting.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        config: Optional[RmfConfig] = None,
        timeout_ms: Optional[float] = None,
        max_message_length: Optional[int] = None,
    ) -> None:
        config = config or RmfConfig()
        self._transport = transport
        self._parser = FrameParser(
            config.max_message_length if max_message_length is None else max_message_length
        )
        self._coordinator = RequestCoordinator(
            transport,
            self._parser,
            timeout_ms=config.timeout_ms if timeout_ms is None else timeout_ms,
        )
        transport.set_receiver(self._parser.feed)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def parser(self) -> FrameParser:
        return self._parser

    @property
    def coordinator(self) -> RequestCoordinator:
        return self._coordinator

    async def write_register(self, device_address: int, register: int, value: int) -> None:
        """Write *value* into *register* of the device at *device_address*.

        The device acknowledges with the write response code and data 0.
        """
        command = encode_write(device_address, register, value)
        response = await self._coordinator.execute(
            command,
            device_address=device_address,
            response_command=response_code(CommandCode.WRITE),
            register=register,
        )
        if response.data != 0:
            raise ProtocolMismatchError("data", 0, response.data)
        logger.debug("Wrote %d to register %d of device %d", value, register, device_address)

    async def read_register(self, device_address: int, register: int) -> int:
        """Return the value of *register* on the device at *device_address*."""
        command = encode_read(device_address, register)
        response = await self._coordinator.execute(
            command,
            device_address=device_address,
            response_command=response_code(CommandCode.READ),
            register=register,
        )
        return response.data

    def add_message_listener(self, callback: MessageCallback) -> None:
        self._parser.add_message_listener(callback)

    def remove_message_listener(self, callback: MessageCallback) -> None:
        self._parser.remove_message_listener(callback)

    def add_error_listener(self, callback: ErrorCallback) -> None:
        self._parser.add_error_listener(callback)

    def remove_error_listener(self, callback: ErrorCallback) -> None:
        self._parser.remove_error_listener(callback)
