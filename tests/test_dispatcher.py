"""Tests for the client-side print transport dispatcher."""

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
from aiohttp import web
from aiohttp.test_utils import unused_port
import pytest

from escpos_receipt.agent import AgentConfig, create_app
from escpos_receipt.exceptions import (
    NativeBridgeError,
    TransportRejectedError,
    TransportUnreachableError,
)
from escpos_receipt.models import ReceiptData
from escpos_receipt.printer import DeviceWriter
from escpos_receipt.transport import (
    AGENT_GENERIC_MESSAGE,
    AGENT_UNREACHABLE_MESSAGE,
    PrinterMode,
    PrintTransportDispatcher,
    strip_agent_prefix,
)


def _fake_backend(path: str, status: int, **response: Any) -> tuple[web.Application, list[Any]]:
    """Build an app answering ``path`` with a fixed response, recording bodies."""
    received: list[Any] = []

    async def handler(request: web.Request) -> web.Response:
        received.append(await request.json())
        if "json" in response:
            return web.json_response(response["json"], status=status)
        return web.Response(status=status, text=response.get("text", ""))

    app = web.Application()
    app.router.add_post(path, handler)
    return app, received


def _base_url(server: Any) -> str:
    return str(server.make_url("")).rstrip("/")


class TestNativeBridge:
    """Tests for the native bridge transport."""

    async def test_success(self, coffee_receipt: ReceiptData) -> None:
        bridge = MagicMock()
        bridge.print_receipt = AsyncMock(return_value={"success": True})
        dispatcher = PrintTransportDispatcher(bridge=bridge)
        await dispatcher.print(coffee_receipt)
        bridge.print_receipt.assert_awaited_once_with(coffee_receipt.to_payload())

    async def test_failure_message(self, coffee_receipt: ReceiptData) -> None:
        bridge = MagicMock()
        bridge.print_receipt = AsyncMock(return_value={"success": False, "error": "Paper out"})
        dispatcher = PrintTransportDispatcher(bridge=bridge)
        with pytest.raises(NativeBridgeError, match="^Native print failed: Paper out$") as exc_info:
            await dispatcher.print(coffee_receipt)
        assert exc_info.value.transport == "native"

    async def test_failure_does_not_fall_back(self, coffee_receipt: ReceiptData) -> None:
        """A native failure never reaches the agent or the server."""
        bridge = MagicMock()
        bridge.print_receipt = AsyncMock(return_value={"success": False, "error": "boom"})
        session = MagicMock()
        dispatcher = PrintTransportDispatcher(session, bridge=bridge, mode=PrinterMode.LOCAL)
        with pytest.raises(NativeBridgeError):
            await dispatcher.print(coffee_receipt)
        session.post.assert_not_called()

    async def test_bridge_exception_becomes_readable(self, coffee_receipt: ReceiptData) -> None:
        bridge = MagicMock()
        bridge.print_receipt = AsyncMock(side_effect=RuntimeError("ipc closed"))
        outcome = await PrintTransportDispatcher(bridge=bridge).try_print(coffee_receipt)
        assert not outcome.ok
        assert outcome.transport == "native"
        assert outcome.message == "Native print failed: ipc closed"

    @pytest.mark.parametrize("result", [None, "ok", ["success"]])
    async def test_malformed_bridge_result(self, coffee_receipt: ReceiptData, result: Any) -> None:
        bridge = MagicMock()
        bridge.print_receipt = AsyncMock(return_value=result)
        with pytest.raises(NativeBridgeError, match="^Native print failed: unexpected bridge response"):
            await PrintTransportDispatcher(bridge=bridge).print(coffee_receipt)

    async def test_bridge_takes_precedence(self) -> None:
        bridge = MagicMock()
        assert PrintTransportDispatcher(bridge=bridge, mode=PrinterMode.LOCAL).transport == "native"
        assert PrintTransportDispatcher(mode=PrinterMode.LOCAL).transport == "agent"
        assert PrintTransportDispatcher().transport == "server"


class TestLocalAgent:
    """Tests for the local agent transport."""

    async def test_success(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        app, received = _fake_backend("/print", 200, json={"success": True})
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        await dispatcher.print(coffee_receipt)
        assert received == [coffee_receipt.to_payload()]

    async def test_unreachable(self, coffee_receipt: ReceiptData) -> None:
        dispatcher = PrintTransportDispatcher(
            mode=PrinterMode.LOCAL, agent_url=f"http://127.0.0.1:{unused_port()}"
        )
        with pytest.raises(TransportUnreachableError) as exc_info:
            await dispatcher.print(coffee_receipt)
        assert str(exc_info.value) == AGENT_UNREACHABLE_MESSAGE
        assert "Is it running?" in str(exc_info.value)
        assert not isinstance(exc_info.value, TransportRejectedError)

    async def test_structured_error_surfaced_exactly(
        self, aiohttp_server: Any, coffee_receipt: ReceiptData
    ) -> None:
        app, _ = _fake_backend("/print", 500, json={"success": False, "error": "Printer disconnected."})
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        with pytest.raises(TransportRejectedError) as exc_info:
            await dispatcher.print(coffee_receipt)
        assert str(exc_info.value) == "Printer disconnected."

    async def test_prefix_stripped(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        app, _ = _fake_backend(
            "/print", 500, json={"success": False, "error": "Local Printer Error: Printer disconnected."}
        )
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        with pytest.raises(TransportRejectedError) as exc_info:
            await dispatcher.print(coffee_receipt)
        assert exc_info.value.message == "Printer disconnected."

    @pytest.mark.parametrize(
        "response",
        [
            {"text": "Internal Server Error"},
            {"json": {"success": False}},
            {"json": ["not", "an", "object"]},
        ],
    )
    async def test_generic_message(
        self, aiohttp_server: Any, coffee_receipt: ReceiptData, response: dict[str, Any]
    ) -> None:
        app, _ = _fake_backend("/print", 500, **response)
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        with pytest.raises(TransportRejectedError, match=f"^{AGENT_GENERIC_MESSAGE}$"):
            await dispatcher.print(coffee_receipt)

    async def test_timeout(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        async def slow(request: web.Request) -> web.Response:
            await asyncio.sleep(1)
            return web.json_response({"success": True})

        app = web.Application()
        app.router.add_post("/print", slow)
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(
            mode=PrinterMode.LOCAL, agent_url=_base_url(server), timeout=0.1
        )
        with pytest.raises(TransportUnreachableError, match="did not respond"):
            await dispatcher.print(coffee_receipt)

    async def test_truncated_error_body(self, coffee_receipt: ReceiptData) -> None:
        resp = MagicMock(status=500)
        resp.json = AsyncMock(side_effect=aiohttp.ClientPayloadError("Response payload is not completed"))
        session = MagicMock()
        session.post.return_value.__aenter__ = AsyncMock(return_value=resp)
        session.post.return_value.__aexit__ = AsyncMock(return_value=False)
        dispatcher = PrintTransportDispatcher(session, mode=PrinterMode.LOCAL)
        outcome = await dispatcher.try_print(coffee_receipt)
        assert not outcome.ok
        assert outcome.message == AGENT_GENERIC_MESSAGE

    async def test_shared_session(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        app, received = _fake_backend("/print", 200, json={"success": True})
        server = await aiohttp_server(app)
        async with aiohttp.ClientSession() as session:
            dispatcher = PrintTransportDispatcher(
                session, mode=PrinterMode.LOCAL, agent_url=_base_url(server) + "/"
            )
            await dispatcher.print(coffee_receipt)
            await dispatcher.print(coffee_receipt)
            assert not session.closed
        assert len(received) == 2


class TestAgentEndToEnd:
    """Dispatcher talking to the real agent application."""

    async def test_receipt_reaches_device(
        self,
        aiohttp_server: Any,
        bound_writer: DeviceWriter,
        device_node: Path,
        coffee_receipt: ReceiptData,
    ) -> None:
        server = await aiohttp_server(create_app(AgentConfig(), writer=bound_writer))
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        await dispatcher.print(coffee_receipt)
        payload = device_node.read_bytes()
        assert payload.startswith(b"\x1b@\x1c.\x1bt\x16")
        assert b"$5.00/450,000" in payload

    async def test_no_device(
        self, aiohttp_server: Any, unbound_writer: DeviceWriter, coffee_receipt: ReceiptData
    ) -> None:
        server = await aiohttp_server(create_app(AgentConfig(), writer=unbound_writer))
        dispatcher = PrintTransportDispatcher(mode=PrinterMode.LOCAL, agent_url=_base_url(server))
        outcome = await dispatcher.try_print(coffee_receipt)
        assert not outcome.ok
        assert outcome.transport == "agent"
        assert outcome.message == "No printer device available"


class TestServer:
    """Tests for the backend server transport."""

    async def test_success(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        app, received = _fake_backend("/api/print/receipt", 200, json={"success": True})
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(server_url=_base_url(server))
        outcome = await dispatcher.try_print(coffee_receipt)
        assert outcome.ok
        assert outcome.transport == "server"
        assert received[0]["orderId"] == "A-1001"

    async def test_rejected(self, aiohttp_server: Any, coffee_receipt: ReceiptData) -> None:
        app, _ = _fake_backend("/api/print/receipt", 503, text="printer busy")
        server = await aiohttp_server(app)
        dispatcher = PrintTransportDispatcher(server_url=_base_url(server))
        with pytest.raises(TransportRejectedError, match="^503: printer busy$"):
            await dispatcher.print(coffee_receipt)

    async def test_unreachable(self, coffee_receipt: ReceiptData) -> None:
        dispatcher = PrintTransportDispatcher(server_url=f"http://127.0.0.1:{unused_port()}")
        with pytest.raises(TransportUnreachableError) as exc_info:
            await dispatcher.print(coffee_receipt)
        assert exc_info.value.transport == "server"

    async def test_default_server_url_is_absolute(self, coffee_receipt: ReceiptData) -> None:
        session = MagicMock()
        session.post.return_value.__aenter__ = AsyncMock(return_value=MagicMock(status=200))
        session.post.return_value.__aexit__ = AsyncMock(return_value=False)
        await PrintTransportDispatcher(session).print(coffee_receipt)
        assert session.post.call_args.args[0] == "http://localhost:3000/api/print/receipt"

    async def test_invalid_url_is_reported(self, coffee_receipt: ReceiptData) -> None:
        outcome = await PrintTransportDispatcher(server_url="").try_print(coffee_receipt)
        assert not outcome.ok
        assert outcome.transport == "server"
        assert outcome.message.startswith("Print request to server failed")

    async def test_truncated_error_body(self, coffee_receipt: ReceiptData) -> None:
        resp = MagicMock(status=502)
        resp.text = AsyncMock(side_effect=aiohttp.ClientPayloadError("Response payload is not completed"))
        session = MagicMock()
        session.post.return_value.__aenter__ = AsyncMock(return_value=resp)
        session.post.return_value.__aexit__ = AsyncMock(return_value=False)
        with pytest.raises(TransportRejectedError, match="^Print request to server failed"):
            await PrintTransportDispatcher(session).print(coffee_receipt)

    async def test_test_print_sends_sample(self, aiohttp_server: Any) -> None:
        app, received = _fake_backend("/api/print/receipt", 200, json={"success": True})
        server = await aiohttp_server(app)
        await PrintTransportDispatcher(server_url=_base_url(server)).test_print()
        assert received[0]["storeName"] == "TEST PRINT"

    async def test_raw_mapping_forwarded(self, aiohttp_server: Any) -> None:
        app, received = _fake_backend("/api/print/receipt", 200, json={"success": True})
        server = await aiohttp_server(app)
        body = {"orderId": "X-1", "items": [], "total": 0, "custom": "kept"}
        await PrintTransportDispatcher(server_url=_base_url(server)).print(body)
        assert received == [body]


def test_strip_agent_prefix() -> None:
    assert strip_agent_prefix("Local Printer Error: Paper out") == "Paper out"
    assert strip_agent_prefix("Paper out") == "Paper out"
