"""Local print agent: a small HTTP server next to the USB printer.

Browser clients cannot reach a USB device, so the till POSTs receipts to
``http://localhost:4000/print`` and the agent renders and writes them. One
DeviceWriter is created per application and every write goes through a
single lock, so concurrent requests never interleave on the tape.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import web

from ..exceptions import DeviceError, InvalidReceiptError
from ..models import ReceiptData
from ..printer import DeviceWriter, find_usb_printers
from ..receipt import ReceiptDocumentBuilder, ReceiptLayout, sample_receipt
from ..schema import parse_receipt
from ..text_utils import TextEncoder
from .config import AgentConfig

_LOGGER = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", AgentConfig)
WRITER_KEY = web.AppKey("writer", DeviceWriter)
BUILDER_KEY = web.AppKey("builder", ReceiptDocumentBuilder)
LOCK_KEY = web.AppKey("write_lock", asyncio.Lock)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Allow the browser front-end to call the agent on localhost."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers.update(_CORS_HEADERS)
    return response


def _failure(status: int, message: str) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


async def print_receipt(app: web.Application, receipt: ReceiptData) -> None:
    """Render a receipt and write it to the app's printer."""
    payload = app[BUILDER_KEY].render(receipt)
    writer = app[WRITER_KEY]
    loop = asyncio.get_running_loop()
    async with app[LOCK_KEY]:
        await loop.run_in_executor(None, writer.write, payload)
    _LOGGER.debug("Printed receipt %s (%d bytes)", receipt.order_id, len(payload))


async def _print_and_respond(app: web.Application, receipt: ReceiptData) -> web.Response:
    try:
        await print_receipt(app, receipt)
    except DeviceError as err:
        _LOGGER.error("Print failed: %s", err)
        return _failure(500, str(err))
    except Exception as err:
        _LOGGER.exception("Unexpected error while printing receipt %s", receipt.order_id)
        return _failure(500, str(err) or err.__class__.__name__)
    _LOGGER.info("Print successful")
    return web.json_response({"success": True})


async def handle_print(request: web.Request) -> web.Response:
    """Handle POST /print."""
    _LOGGER.info("Print request received")
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _failure(400, "Request body must be JSON")
    try:
        receipt = parse_receipt(body)
    except InvalidReceiptError as err:
        return _failure(400, str(err))
    return await _print_and_respond(request.app, receipt)


async def handle_test(request: web.Request) -> web.Response:
    """Handle POST /test by printing the sample receipt."""
    _LOGGER.info("Test print requested")
    return await _print_and_respond(request.app, sample_receipt())


async def handle_status(request: web.Request) -> web.Response:
    """Handle GET /status."""
    writer = request.app[WRITER_KEY]
    loop = asyncio.get_running_loop()
    usb_devices = await loop.run_in_executor(None, find_usb_printers)
    return web.json_response(
        {
            "status": "running",
            "printer_connected": writer.is_bound,
            "device_path": writer.device_path,
            "usb_devices": usb_devices,
        }
    )


async def handle_diagnostics(request: web.Request) -> web.Response:
    """Handle GET /diagnostics."""
    config = request.app[CONFIG_KEY]
    layout = request.app[BUILDER_KEY].layout
    return web.json_response(
        {
            "agent": {"host": config.host, "port": config.port},
            "layout": {
                "line_width": layout.line_width,
                "codepage_number": layout.codepage_number,
            },
            "codepages": {
                "latin": config.device.latin_codepage,
                "arabic": config.device.arabic_codepage,
            },
            "device": request.app[WRITER_KEY].get_diagnostics(),
        }
    )


def create_app(
    config: AgentConfig | None = None,
    *,
    writer: DeviceWriter | None = None,
    builder: ReceiptDocumentBuilder | None = None,
) -> web.Application:
    """Create the agent application.

    The device is probed here, once; pass ``writer`` to supply one directly.
    """
    config = config if config is not None else AgentConfig()
    if writer is None:
        writer = DeviceWriter(config.device.device_paths)
    if builder is None:
        encoder = TextEncoder(
            latin_codepage=config.device.latin_codepage,
            arabic_codepage=config.device.arabic_codepage,
        )
        builder = ReceiptDocumentBuilder(encoder, ReceiptLayout(line_width=config.device.line_width))

    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config
    app[WRITER_KEY] = writer
    app[BUILDER_KEY] = builder
    app[LOCK_KEY] = asyncio.Lock()
    app.router.add_post("/print", handle_print)
    app.router.add_post("/test", handle_test)
    app.router.add_get("/status", handle_status)
    app.router.add_get("/diagnostics", handle_diagnostics)
    return app


def run_agent(config: AgentConfig) -> None:
    """Run the agent until interrupted."""
    app = create_app(config)
    _LOGGER.info(
        "Printer agent listening on http://%s:%s (printer device: %s)",
        config.host,
        config.port,
        app[WRITER_KEY].get_connection_info(),
    )
    web.run_app(app, host=config.host, port=config.port, print=None)
