"""Request/response correlation for a single in-flight command."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from .errors import (
    ChecksumError,
    ProtocolMismatchError,
    RequestInProgressError,
    RequestTimeoutError,
)
from .protocol.message import Message
from .protocol.parser import FrameParser
from .settings import RESPONSE_TIMEOUT_MS
from .transport.base import Transport

__all__ = [
    "PendingRequest",
    "RequestCoordinator",
    "RequestState",
]

logger = logging.getLogger(__name__)


def _check_timeout(timeout_ms: float) -> float:
    if timeout_ms <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout_ms}")
    return timeout_ms


class RequestState(Enum):
    IDLE = "idle"
    SENT = "sent"
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    CHECKSUM_FAILED = "checksum_failed"
    TIMED_OUT = "timed_out"


class PendingRequest:
    """Correlation state for one request, alive from transmit until teardown.

    Entering the context subscribes to the next message and the next parser
    error. Leaving it removes both listeners and cancels the timer, whatever
    the exit path.
    """

    def __init__(
        self,
        parser: FrameParser,
        future: "asyncio.Future[Message]",
        *,
        device_address: int,
        response_command: int,
        register: int,
        timeout_ms: float,
    ) -> None:
        self.parser = parser
        self.future = future
        self.device_address = device_address
        self.response_command = response_command
        self.register = register
        self.timeout_ms = timeout_ms
        self._timer: Optional[asyncio.TimerHandle] = None

    def __enter__(self) -> "PendingRequest":
        self.parser.add_message_listener(self._on_message)
        self.parser.add_error_listener(self._on_error)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.parser.remove_message_listener(self._on_message)
        self.parser.remove_error_listener(self._on_error)
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def start_timer(self, loop: asyncio.AbstractEventLoop) -> None:
        self._timer = loop.call_later(self.timeout_ms / 1000.0, self._on_timeout)

    def check(self, message: Message) -> None:
        """Raise :class:`ProtocolMismatchError` unless *message* answers this request."""
        expectations = (
            ("device address", self.device_address, message.device_address),
            ("command", self.response_command, message.command),
            ("register", self.register, message.register),
        )
        for field, expected, actual in expectations:
            if expected != actual:
                raise ProtocolMismatchError(field, expected, actual)

    def _on_message(self, message: Message) -> None:
        if not self.future.done():
            self.future.set_result(message)

    def _on_error(self, error: Exception) -> None:
        if not self.future.done():
            self.future.set_exception(error)

    def _on_timeout(self) -> None:
        if not self.future.done():
            self.future.set_exception(RequestTimeoutError(self.timeout_ms))


class RequestCoordinator:
    """Sends one command at a time and waits for the response that answers it."""

    def __init__(
        self,
        transport: Transport,
        parser: FrameParser,
        *,
        timeout_ms: float = RESPONSE_TIMEOUT_MS,
    ) -> None:
        self.transport = transport
        self.parser = parser
        self.timeout_ms = _check_timeout(timeout_ms)
        self._pending: Optional[PendingRequest] = None
        self._state = RequestState.IDLE
        self._last_outcome: Optional[RequestState] = None

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def last_outcome(self) -> Optional[RequestState]:
        """Correlation result of the most recent call.

        ``None`` while a call is running and after a call that ended before a
        response was correlated (send failure or cancellation). Checks made by
        callers on a correlated message, such as the write acknowledgement
        data, are not reflected here.
        """
        return self._last_outcome

    @property
    def busy(self) -> bool:
        return self._pending is not None

    async def execute(
        self,
        command: bytes,
        *,
        device_address: int,
        response_command: int,
        register: int,
        timeout_ms: Optional[float] = None,
    ) -> Message:
        """Transmit *command* and return the message that answers it.

        Args:
            command: Encoded command bytes.
            device_address: Address the response must come from.
            response_command: Command code the response must carry.
            register: Register the response must refer to.
            timeout_ms: Overrides the coordinator timeout for this call.

        Raises:
            RequestInProgressError: If another request is still waiting.
            ChecksumError: If a corrupted frame arrived first.
            ProtocolMismatchError: If the first message answers something else.
            RequestTimeoutError: If nothing arrived in time.
            ValueError: If the timeout is not positive; nothing is sent.
        """
        if self._pending is not None:
            raise RequestInProgressError()
        timeout_ms = _check_timeout(self.timeout_ms if timeout_ms is None else timeout_ms)
        self._last_outcome = None

        loop = asyncio.get_running_loop()
        pending = PendingRequest(
            self.parser,
            loop.create_future(),
            device_address=device_address,
            response_command=response_command,
            register=register,
            timeout_ms=timeout_ms,
        )
        self._pending = pending
        try:
            self.parser.clear()
            with pending:
                self.transport.send(command)
                self._set_state(RequestState.SENT)
                pending.start_timer(loop)
                try:
                    message = await pending.future
                except ChecksumError:
                    self._finish(RequestState.CHECKSUM_FAILED)
                    raise
                except RequestTimeoutError:
                    self._finish(RequestState.TIMED_OUT)
                    raise
            try:
                pending.check(message)
            except ProtocolMismatchError:
                self._finish(RequestState.MISMATCHED)
                raise
            self._finish(RequestState.MATCHED)
            return message
        finally:
            self._pending = None
            self._set_state(RequestState.IDLE)

    def _finish(self, outcome: RequestState) -> None:
        self._last_outcome = outcome
        self._set_state(outcome)

    def _set_state(self, state: RequestState) -> None:
        if state is not self._state:
            logger.debug("Request state %s -> %s", self._state.value, state.value)
        self._state = state
