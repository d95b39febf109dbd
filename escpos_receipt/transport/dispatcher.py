"""Client-side print dispatch: native bridge, local agent or server.

Exactly one transport is used per call, chosen from configuration rather
than detected per call. A failure is reported to the caller and never
cascades to another transport, and nothing is retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
import contextlib
from enum import Enum
import logging
from typing import Any, Protocol

import aiohttp

from ..const import (
    DEFAULT_AGENT_URL,
    DEFAULT_SERVER_PRINT_PATH,
    DEFAULT_SERVER_URL,
    DEFAULT_TIMEOUT,
    TRANSPORT_AGENT,
    TRANSPORT_NATIVE,
    TRANSPORT_SERVER,
)
from ..exceptions import (
    NativeBridgeError,
    PrintError,
    TransportRejectedError,
    TransportUnreachableError,
)
from ..models import ReceiptData, TransportOutcome
from ..receipt import sample_receipt

_LOGGER = logging.getLogger(__name__)

AGENT_ERROR_PREFIX = "Local Printer Error: "
AGENT_UNREACHABLE_MESSAGE = "Could not connect to Local Printer Agent. Is it running?"
AGENT_GENERIC_MESSAGE = "Local Agent failed to print"
AGENT_TIMEOUT_MESSAGE = "Local Printer Agent did not respond in time"


class PrinterMode(Enum):
    """Where receipts go when no native bridge is installed."""

    SERVER = "server"
    LOCAL = "local"


class NativeBridge(Protocol):
    """Print hook provided by a native host application."""

    async def print_receipt(self, receipt: dict[str, Any]) -> Mapping[str, Any]:
        """Print a receipt, returning ``{"success": bool, "error": str?}``."""


def _payload(receipt: ReceiptData | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(receipt, ReceiptData):
        return receipt.to_payload()
    return dict(receipt)


def strip_agent_prefix(message: str) -> str:
    """Remove the agent's internal error prefix, if present."""
    if message.startswith(AGENT_ERROR_PREFIX):
        return message[len(AGENT_ERROR_PREFIX):]
    return message


class PrintTransportDispatcher:
    """Send receipts through the configured transport.

    Args:
        session: Shared client session. When None, a short-lived session is
            opened for each HTTP call.
        bridge: Native bridge; when set it handles every print.
        mode: Selects the local agent or the server when there is no bridge.
        agent_url: Base URL of the local print agent.
        server_url: Base URL of the backend.
        timeout: Total seconds allowed for one HTTP request.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        bridge: NativeBridge | None = None,
        mode: PrinterMode = PrinterMode.SERVER,
        agent_url: str = DEFAULT_AGENT_URL,
        server_url: str = DEFAULT_SERVER_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session
        self._bridge = bridge
        self._mode = mode
        self._agent_url = agent_url.rstrip("/")
        self._server_url = server_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def transport(self) -> str:
        """Return the name of the transport the next print will use."""
        if self._bridge is not None:
            return TRANSPORT_NATIVE
        if self._mode is PrinterMode.LOCAL:
            return TRANSPORT_AGENT
        return TRANSPORT_SERVER

    async def print(self, receipt: ReceiptData | Mapping[str, Any]) -> None:
        """Print one receipt.

        Raises:
            NativeBridgeError: The native bridge reported a failure.
            TransportUnreachableError: The agent or server could not be reached.
            TransportRejectedError: The agent or server reported a failure.
        """
        payload = _payload(receipt)
        transport = self.transport
        _LOGGER.debug("Dispatching receipt %s via %s", payload.get("orderId"), transport)
        if transport == TRANSPORT_NATIVE:
            await self._print_native(payload)
        elif transport == TRANSPORT_AGENT:
            await self._print_agent(payload)
        else:
            await self._print_server(payload)

    async def try_print(self, receipt: ReceiptData | Mapping[str, Any]) -> TransportOutcome:
        """Print one receipt and report the outcome instead of raising.

        Every transport failure comes back as a failed outcome carrying a
        readable message.
        """
        try:
            await self.print(receipt)
        except PrintError as err:
            transport = getattr(err, "transport", self.transport)
            _LOGGER.warning("Print via %s failed: %s", transport, err)
            return TransportOutcome.failed(transport, str(err))
        return TransportOutcome.succeeded(self.transport)

    async def test_print(self) -> None:
        """Print the sample receipt through the configured transport."""
        await self.print(sample_receipt())

    async def _print_native(self, payload: dict[str, Any]) -> None:
        if self._bridge is None:
            raise NativeBridgeError(
                TRANSPORT_NATIVE, "Native print failed: no native bridge installed"
            )
        try:
            result = await self._bridge.print_receipt(payload)
        except Exception as err:
            _LOGGER.debug("Native bridge raised", exc_info=True)
            raise NativeBridgeError(TRANSPORT_NATIVE, f"Native print failed: {err}") from err
        if not isinstance(result, Mapping):
            raise NativeBridgeError(
                TRANSPORT_NATIVE, f"Native print failed: unexpected bridge response {result!r}"
            )
        if not result.get("success"):
            error = result.get("error") or "unknown error"
            raise NativeBridgeError(TRANSPORT_NATIVE, f"Native print failed: {error}")

    @contextlib.asynccontextmanager
    async def _client(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _print_agent(self, payload: dict[str, Any]) -> None:
        url = f"{self._agent_url}/print"
        try:
            async with self._client() as session:
                async with session.post(url, json=payload, timeout=self._timeout) as resp:
                    if resp.status < 400:
                        return
                    try:
                        body = await resp.json(content_type=None)
                    except (ValueError, aiohttp.ContentTypeError):
                        body = None
        except asyncio.TimeoutError as err:
            raise TransportUnreachableError(TRANSPORT_AGENT, AGENT_TIMEOUT_MESSAGE) from err
        except aiohttp.ClientConnectionError as err:
            _LOGGER.debug("Local agent at %s unreachable: %s", url, err)
            raise TransportUnreachableError(TRANSPORT_AGENT, AGENT_UNREACHABLE_MESSAGE) from err
        except aiohttp.ClientError as err:
            _LOGGER.debug("Request to local agent at %s failed: %s", url, err)
            raise TransportRejectedError(TRANSPORT_AGENT, AGENT_GENERIC_MESSAGE) from err

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, str) and error:
            raise TransportRejectedError(TRANSPORT_AGENT, strip_agent_prefix(error))
        raise TransportRejectedError(TRANSPORT_AGENT, AGENT_GENERIC_MESSAGE)

    async def _print_server(self, payload: dict[str, Any]) -> None:
        url = f"{self._server_url}{DEFAULT_SERVER_PRINT_PATH}"
        try:
            async with self._client() as session:
                async with session.post(url, json=payload, timeout=self._timeout) as resp:
                    if resp.status < 400:
                        return
                    body = await resp.text()
        except asyncio.TimeoutError as err:
            raise TransportUnreachableError(
                TRANSPORT_SERVER, "Print server did not respond in time"
            ) from err
        except aiohttp.ClientConnectionError as err:
            raise TransportUnreachableError(
                TRANSPORT_SERVER, f"Could not connect to print server: {err}"
            ) from err
        except aiohttp.ClientError as err:
            raise TransportRejectedError(
                TRANSPORT_SERVER, f"Print request to server failed: {err}"
            ) from err
        raise TransportRejectedError(TRANSPORT_SERVER, f"{resp.status}: {body}")
