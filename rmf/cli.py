"""Command line front end: read or write a single register."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .client import RmfMaster
from .config import RmfConfig, load_config, save_config
from .errors import RmfError
from .settings import CONFIG_FILE, configure_logging
from .transport.serial_transport import SerialTransport, list_ports

logger = logging.getLogger(__name__)


def positive_int(text: str) -> int:
    """argparse type for counts and durations that must be at least 1."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rmf", description="Read and write RMF device registers over a serial line"
    )
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file")
    parser.add_argument("--port", help="Serial port, e.g. /dev/ttyUSB0 or COM3")
    parser.add_argument("--baudrate", type=positive_int, help="Serial baud rate")
    parser.add_argument("--timeout-ms", type=positive_int, help="Response timeout in milliseconds")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    read = commands.add_parser("read", help="Read a register and print its value")
    read.add_argument("address", type=int, help="Device address (0-63)")
    read.add_argument("register", type=int, help="Register number (0-65535)")

    write = commands.add_parser("write", help="Write a value into a register")
    write.add_argument("address", type=int, help="Device address (0-63)")
    write.add_argument("register", type=int, help="Register number (0-65535)")
    write.add_argument("value", type=int, help="Register value (0-65535)")

    commands.add_parser("ports", help="List available serial ports")
    commands.add_parser(
        "save-config", help="Write the effective port and tunables to the config file"
    )
    return parser


def _apply_overrides(config: RmfConfig, args: argparse.Namespace) -> RmfConfig:
    if args.port:
        config.port = args.port
    if args.baudrate is not None:
        config.baudrate = args.baudrate
    if args.timeout_ms is not None:
        config.timeout_ms = args.timeout_ms
    return config


async def _run(config: RmfConfig, args: argparse.Namespace) -> None:
    transport = SerialTransport(config.port, baudrate=config.baudrate)
    transport.open()
    try:
        master = RmfMaster(transport, config=config)
        if args.command == "read":
            value = await master.read_register(args.address, args.register)
            print(value)
        else:
            await master.write_register(args.address, args.register, args.value)
            print("OK")
    finally:
        transport.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(debug=args.debug)

    if args.command == "ports":
        for port in list_ports():
            print(port)
        return 0

    config = _apply_overrides(load_config(args.config), args)
    if args.command == "save-config":
        return 0 if save_config(config, args.config) else 1

    if not config.port:
        parser.error("no serial port given (use --port or set 'port' in the config file)")

    try:
        asyncio.run(_run(config, args))
    except RmfError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0
