"""Incremental frame parser for bytes received from an RMF device."""

from __future__ import annotations

import logging
import re
from typing import Callable, List

from .message import Message
from .encoder import compute_checksum
from ..errors import ChecksumError
from ..settings import MAX_MESSAGE_LENGTH

MessageCallback = Callable[[Message], None]
ErrorCallback = Callable[[Exception], None]

FRAME_PATTERN = re.compile(
    r"@(?P<device_address>\d+),(?P<command>\d+),(?P<register>\d+),"
    r"(?P<data>\d+),(?P<checksum>\d+)\r"
)

_LOGGER = logging.getLogger(__name__)


class FrameParser:
    """Turns a fragmented byte stream into validated messages.

    Received text is kept in a sliding window holding the most recent
    ``max_length`` characters. The window is trimmed before frames are
    extracted, so a frame must complete within that many characters of
    the data received after it started.
    """

    def __init__(self, max_length: int = MAX_MESSAGE_LENGTH) -> None:
        if max_length <= 0:
            raise ValueError(f"Buffer length must be positive, got {max_length}")
        self.max_length = max_length
        self._buffer = ""
        self._message_callbacks: List[MessageCallback] = []
        self._error_callbacks: List[ErrorCallback] = []

    @property
    def buffer(self) -> str:
        return self._buffer

    def clear(self) -> None:
        self._buffer = ""

    def add_message_listener(self, callback: MessageCallback) -> None:
        self._message_callbacks.append(callback)

    def remove_message_listener(self, callback: MessageCallback) -> None:
        try:
            self._message_callbacks.remove(callback)
        except ValueError:
            pass

    def add_error_listener(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def remove_error_listener(self, callback: ErrorCallback) -> None:
        try:
            self._error_callbacks.remove(callback)
        except ValueError:
            pass

    def feed(self, data: bytes) -> List[Message]:
        """Consume a chunk of received bytes.

        Every complete frame found in the window is removed from it, along
        with anything preceding it. Valid frames are dispatched to message
        listeners; frames with a bad checksum are dispatched to error
        listeners as :class:`ChecksumError`.

        Returns:
            The messages decoded from this chunk, in arrival order.
        """
        text = bytes(data).decode("ascii", errors="replace")
        self._buffer = (self._buffer + text)[-self.max_length:]
        _LOGGER.debug("RX %r", text)

        messages: List[Message] = []
        match = FRAME_PATTERN.search(self._buffer)
        while match:
            self._buffer = self._buffer[match.end():]
            message = self._decode(match)
            if message is not None:
                messages.append(message)
            match = FRAME_PATTERN.search(self._buffer)
        return messages

    def _decode(self, match: "re.Match[str]") -> Message | None:
        fields = {name: int(text) for name, text in match.groupdict().items()}
        expected = compute_checksum(
            fields["device_address"], fields["command"], fields["register"], fields["data"]
        )
        if fields["checksum"] != expected:
            error = ChecksumError(match.group(0), expected, fields["checksum"])
            _LOGGER.warning("%s", error)
            self._dispatch(self._error_callbacks, error)
            return None
        message = Message(
            device_address=fields["device_address"],
            command=fields["command"],
            register=fields["register"],
            data=fields["data"],
        )
        self._dispatch(self._message_callbacks, message)
        return message

    def _dispatch(self, callbacks: list, payload: object) -> None:
        for callback in list(callbacks):
            try:
                callback(payload)
            except Exception:
                _LOGGER.debug("Parser listener failed", exc_info=True)
