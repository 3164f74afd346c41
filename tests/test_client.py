import asyncio
import unittest
from typing import Optional

from rmf.client import RmfMaster
from rmf.config import RmfConfig
from rmf.coordinator import RequestState
from rmf.errors import (
    ChecksumError,
    ProtocolMismatchError,
    RequestInProgressError,
    RequestTimeoutError,
    ValidationError,
)
from rmf.transport.base import Transport


class ScriptedTransport(Transport):
    """Answers every send with a fixed reply, delivered immediately."""

    def __init__(self, reply: Optional[bytes] = None) -> None:
        super().__init__()
        self.reply = reply
        self.sent: list = []

    def send(self, data: bytes) -> None:
        self.sent.append(data)
        if self.reply is not None:
            self.deliver(self.reply)


class RmfMasterTests(unittest.IsolatedAsyncioTestCase):
    async def test_write_register_succeeds_on_zero_ack(self) -> None:
        transport = ScriptedTransport(b"@5,131,10,0,146\r")
        master = RmfMaster(transport)
        result = await master.write_register(5, 10, 1)
        self.assertIsNone(result)
        self.assertEqual(transport.sent, [b"@5,3,10,1,19\r"])

    async def test_write_register_rejects_non_zero_ack_data(self) -> None:
        master = RmfMaster(ScriptedTransport(b"@5,131,10,7,153\r"))
        with self.assertRaises(ProtocolMismatchError) as ctx:
            await master.write_register(5, 10, 1)
        self.assertEqual(ctx.exception.field, "data")
        self.assertEqual(ctx.exception.expected, 0)
        self.assertEqual(ctx.exception.actual, 7)
        self.assertIn("7", str(ctx.exception))
        # Correlation succeeded; the acknowledgement data is checked by the client.
        self.assertIs(master.coordinator.last_outcome, RequestState.MATCHED)

    async def test_read_register_returns_data(self) -> None:
        transport = ScriptedTransport(b"@5,130,10,1234,1379\r")
        master = RmfMaster(transport)
        self.assertEqual(await master.read_register(5, 10), 1234)
        self.assertEqual(transport.sent, [b"@5,2,10,0,17\r"])

    async def test_read_register_rejects_other_device(self) -> None:
        master = RmfMaster(ScriptedTransport(b"@6,130,10,42,188\r"))
        with self.assertRaises(ProtocolMismatchError) as ctx:
            await master.read_register(5, 10)
        self.assertEqual(ctx.exception.field, "device address")
        self.assertEqual(ctx.exception.expected, 5)
        self.assertEqual(ctx.exception.actual, 6)

    async def test_read_register_times_out(self) -> None:
        master = RmfMaster(ScriptedTransport(), timeout_ms=20)
        loop = asyncio.get_running_loop()
        started = loop.time()
        with self.assertRaises(RequestTimeoutError):
            await master.read_register(5, 10)
        self.assertGreaterEqual(loop.time() - started, 0.015)

    async def test_checksum_failure_reaches_caller_and_observers(self) -> None:
        master = RmfMaster(ScriptedTransport(b"@5,130,10,1234,1380\r"))
        errors = []
        master.add_error_listener(errors.append)
        with self.assertRaises(ChecksumError):
            await master.read_register(5, 10)
        self.assertEqual(len(errors), 1)

    async def test_invalid_address_sends_nothing(self) -> None:
        transport = ScriptedTransport(b"@5,131,10,0,146\r")
        master = RmfMaster(transport)
        with self.assertRaises(ValidationError) as ctx:
            await master.write_register(64, 1, 1)
        self.assertEqual(ctx.exception.parameter, "device address")
        self.assertEqual(transport.sent, [])

    async def test_overlapping_calls_fail_fast(self) -> None:
        transport = ScriptedTransport()
        master = RmfMaster(transport, timeout_ms=30)
        first = asyncio.ensure_future(master.read_register(5, 10))
        await asyncio.sleep(0)
        with self.assertRaises(RequestInProgressError):
            await master.write_register(5, 10, 1)
        with self.assertRaises(RequestTimeoutError):
            await first
        self.assertEqual(len(transport.sent), 1)

    def test_observers_see_unsolicited_traffic(self) -> None:
        transport = ScriptedTransport()
        master = RmfMaster(transport)
        messages = []
        errors = []
        master.add_message_listener(messages.append)
        master.add_error_listener(errors.append)

        transport.deliver(b"@5,131,10,0,146\r@5,131,10,0,147\r")

        self.assertEqual([m.register for m in messages], [10])
        self.assertEqual(len(errors), 1)

        master.remove_message_listener(messages.append)
        master.remove_error_listener(errors.append)
        transport.deliver(b"@5,131,10,0,146\r@5,131,10,0,147\r")
        self.assertEqual(len(messages), 1)
        self.assertEqual(len(errors), 1)

    def test_config_supplies_tunables(self) -> None:
        master = RmfMaster(
            ScriptedTransport(), config=RmfConfig(timeout_ms=75, max_message_length=64)
        )
        self.assertEqual(master.coordinator.timeout_ms, 75)
        self.assertEqual(master.parser.max_length, 64)

    def test_explicit_arguments_override_config(self) -> None:
        master = RmfMaster(
            ScriptedTransport(),
            config=RmfConfig(timeout_ms=75, max_message_length=64),
            timeout_ms=10,
            max_message_length=300,
        )
        self.assertEqual(master.coordinator.timeout_ms, 10)
        self.assertEqual(master.parser.max_length, 300)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
