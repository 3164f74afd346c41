"""Exception hierarchy raised by the RMF master."""

from __future__ import annotations

from typing import Optional


class RmfError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(RmfError, ValueError):
    """A command parameter is not an integer in its valid range."""

    def __init__(self, parameter: str, value: object, minimum: int, maximum: int) -> None:
        self.parameter = parameter
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"{parameter} must be an integer in the range {minimum} to {maximum}, "
            f"got {value!r}"
        )


class ChecksumError(RmfError):
    """A received frame carried a checksum that does not match its fields."""

    def __init__(self, frame: str, expected: int, actual: int) -> None:
        self.frame = frame
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"RX checksum failure: expected {expected}, frame carries {actual} "
            f"({frame!r})"
        )


class ProtocolMismatchError(RmfError):
    """A response was decoded but does not answer the request in flight."""

    def __init__(self, field: str, expected: int, actual: int) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected response with {field} {expected}, but response has {field} {actual}"
        )


class RequestTimeoutError(RmfError, TimeoutError):
    """No response arrived within the configured window."""

    def __init__(self, timeout_ms: float) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"No response received within {timeout_ms} ms")


class RequestInProgressError(RmfError):
    """A request was started while another one is still waiting for its response."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Another request is already waiting for a response")


class TransportError(RmfError):
    """The underlying byte transport is unavailable or failed."""
