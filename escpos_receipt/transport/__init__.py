"""Delivery of receipts from the till to a printer."""

from __future__ import annotations

from .dispatcher import (
    AGENT_ERROR_PREFIX,
    AGENT_GENERIC_MESSAGE,
    AGENT_UNREACHABLE_MESSAGE,
    NativeBridge,
    PrinterMode,
    PrintTransportDispatcher,
    strip_agent_prefix,
)

__all__ = [
    "AGENT_ERROR_PREFIX",
    "AGENT_GENERIC_MESSAGE",
    "AGENT_UNREACHABLE_MESSAGE",
    "NativeBridge",
    "PrintTransportDispatcher",
    "PrinterMode",
    "strip_agent_prefix",
]
