"""Command line entry point: ``python -m escpos_receipt``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from .agent import AgentConfig, run_agent
from .const import DEFAULT_AGENT_URL, DEFAULT_SERVER_URL, DEFAULT_TIMEOUT, ENV_PRINTER_MODE
from .exceptions import DeviceError, InvalidReceiptError, PrintError
from .printer import DeviceWriter, find_usb_printers, probe_device_paths
from .receipt import ReceiptDocumentBuilder, sample_receipt
from .schema import parse_receipt
from .text_utils import TextEncoder
from .transport import PrinterMode, PrintTransportDispatcher

_LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="escpos-receipt",
        description="Arabic/Latin receipt printing for ESC/POS thermal printers.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the local print agent")
    serve.add_argument("--host", help="interface to listen on")
    serve.add_argument("--port", type=int, help="port to listen on")
    serve.add_argument(
        "--device",
        action="append",
        dest="devices",
        metavar="PATH",
        help="printer device node to probe (repeatable, in order)",
    )

    test = sub.add_parser("test-print", help="print the sample receipt on the local device")
    test.add_argument("--device", action="append", dest="devices", metavar="PATH")

    analyze = sub.add_parser("analyze", help="show how text maps to the printer codepage")
    analyze.add_argument("text")

    sub.add_parser("status", help="report printer device nodes and USB printers")

    send = sub.add_parser("send", help="send a receipt JSON file through a print transport")
    send.add_argument("file", help="receipt JSON file, or - for stdin")
    send.add_argument(
        "--mode",
        default=os.environ.get(ENV_PRINTER_MODE, PrinterMode.SERVER.value),
        help=f"server or local, case-insensitive (default: ${ENV_PRINTER_MODE})",
    )
    send.add_argument("--agent-url", default=DEFAULT_AGENT_URL)
    send.add_argument("--server-url", default=DEFAULT_SERVER_URL)
    send.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    return parser


def _agent_config(args: argparse.Namespace) -> AgentConfig:
    config = AgentConfig.from_env()
    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None):
        config.port = args.port
    if getattr(args, "devices", None):
        config.device.device_paths = tuple(args.devices)
    return config


def _cmd_serve(args: argparse.Namespace) -> int:
    run_agent(_agent_config(args))
    return 0


def _cmd_test_print(args: argparse.Namespace) -> int:
    config = _agent_config(args)
    writer = DeviceWriter(config.device.device_paths)
    try:
        writer.write(ReceiptDocumentBuilder().render(sample_receipt()))
    except DeviceError as err:
        _LOGGER.error("Test print failed: %s", err)
        return 1
    print(f"Test receipt sent to {writer.device_path}")
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    for row in TextEncoder().analyze(args.text):
        print(row.describe())
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    config = _agent_config(args)
    report: dict[str, Any] = {
        "candidates": list(config.device.device_paths),
        "device_path": probe_device_paths(config.device.device_paths),
        "usb_devices": find_usb_printers(),
    }
    print(json.dumps(report, indent=2))
    return 0 if report["device_path"] else 1


def _printer_mode(value: str) -> PrinterMode | None:
    """Resolve a mode name case-insensitively; None when it is unknown."""
    try:
        return PrinterMode(value.strip().lower())
    except ValueError:
        return None


async def _send(args: argparse.Namespace, payload: Any, mode: PrinterMode) -> int:
    receipt = parse_receipt(payload)
    dispatcher = PrintTransportDispatcher(
        mode=mode,
        agent_url=args.agent_url,
        server_url=args.server_url,
        timeout=args.timeout,
    )
    outcome = await dispatcher.try_print(receipt)
    if not outcome.ok:
        _LOGGER.error("Print via %s failed: %s", outcome.transport, outcome.message)
        return 1
    print(f"Receipt {receipt.order_id} sent via {outcome.transport}")
    return 0


def _cmd_send(args: argparse.Namespace) -> int:
    mode = _printer_mode(args.mode)
    if mode is None:
        choices = ", ".join(item.value for item in PrinterMode)
        _LOGGER.error("Unknown printer mode %r, expected one of: %s", args.mode, choices)
        return 2
    try:
        if args.file == "-":
            payload = json.load(sys.stdin)
        else:
            with open(args.file, encoding="utf-8") as handle:
                payload = json.load(handle)
    except (OSError, ValueError) as err:
        _LOGGER.error("Could not read receipt %s: %s", args.file, err)
        return 2
    try:
        return asyncio.run(_send(args, payload, mode))
    except InvalidReceiptError as err:
        _LOGGER.error("%s", err)
        return 2


_COMMANDS = {
    "serve": _cmd_serve,
    "test-print": _cmd_test_print,
    "analyze": _cmd_analyze,
    "status": _cmd_status,
    "send": _cmd_send,
}


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface and return its exit code."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return _COMMANDS[args.command](args)
    except PrintError as err:
        _LOGGER.error("%s", err)
        return 1


if __name__ == "__main__":
    sys.exit(main())
