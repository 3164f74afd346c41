"""Serial port transport backed by pyserial."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import List, Optional

import serial
import serial.tools.list_ports

from .base import Transport
from ..errors import TransportError
from ..settings import DEFAULT_BAUDRATE

_LOGGER = logging.getLogger(__name__)


def list_ports() -> List[str]:
    """Return the device names of the serial ports present on this machine."""
    return [port.device for port in serial.tools.list_ports.comports()]


class SerialTransport(Transport):
    """Owns a serial session and forwards received bytes to an event loop.

    A daemon thread polls the port and hands every chunk to the loop with
    ``call_soon_threadsafe``, so receivers always run on the loop thread.

    Usage::

        transport = SerialTransport("/dev/ttyUSB0")
        transport.open()          # inside a running event loop
        master = RmfMaster(transport)
        value = await master.read_register(5, 10)
        transport.close()
    """

    def __init__(
        self,
        port: str,
        *,
        baudrate: int = DEFAULT_BAUDRATE,
        read_timeout: float = 0.05,
        write_timeout: float = 0.5,
    ) -> None:
        super().__init__()
        self.port = port
        self.baudrate = baudrate
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._serial: Optional[serial.Serial] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._stop_reader = threading.Event()
        self._write_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return bool(self._serial and self._serial.is_open)

    def open(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Open the port and start forwarding received bytes to *loop*.

        Args:
            loop: Loop that runs the receiver. Defaults to the running loop.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.is_open:
            return
        self._loop = loop or asyncio.get_running_loop()
        try:
            ser = serial.Serial(
                self.port,
                self.baudrate,
                timeout=self.read_timeout,
                write_timeout=self.write_timeout,
            )
        except serial.SerialException as exc:
            raise TransportError(f"Could not open serial port {self.port}: {exc}") from exc
        try:
            self._serial = ser
            self._stop_reader.clear()
            self._reader_thread = threading.Thread(
                target=self._reader_loop,
                name=f"SerialTransport[{self.port}]",
                daemon=True,
            )
            self._reader_thread.start()
        except Exception:
            try:
                ser.close()
            except Exception:
                pass
            self._serial = None
            raise
        _LOGGER.info("Opened %s at %d baud", self.port, self.baudrate)

    def close(self) -> None:
        self._stop_reader.set()
        if self._reader_thread and self._reader_thread.is_alive():
            self._reader_thread.join(timeout=1.0)
        self._reader_thread = None
        if self._serial is not None:
            try:
                self._serial.close()
            except Exception:
                _LOGGER.debug("Failed to close %s", self.port, exc_info=True)
            _LOGGER.info("Closed %s", self.port)
        self._serial = None
        self._loop = None

    def send(self, data: bytes) -> None:
        if not self.is_open:
            raise TransportError("Serial port is not open")
        _LOGGER.debug("TX %r", data)
        try:
            with self._write_lock:
                assert self._serial is not None
                self._serial.write(data)
        except serial.SerialException as exc:
            raise TransportError(f"Write to {self.port} failed: {exc}") from exc

    def _reader_loop(self) -> None:
        while not self._stop_reader.is_set():
            ser = self._serial
            loop = self._loop
            if ser is None or loop is None:
                break
            try:
                raw = ser.read(ser.in_waiting or 1)
            except Exception:
                _LOGGER.debug("Serial read failed on %s", self.port, exc_info=True)
                break
            if not raw:
                continue
            try:
                loop.call_soon_threadsafe(self.deliver, bytes(raw))
            except RuntimeError:
                # Loop already closed.
                break
        self._stop_reader.set()
