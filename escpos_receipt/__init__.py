"""Receipt printing for 80mm ESC/POS thermal printers.

Receipts with mixed Arabic and Latin text and dual-currency totals are laid
out as ESC/POS commands, encoded for the printer's CP864/CP437 codepages and
delivered through a native bridge, a local HTTP agent or a backend server.
"""

from __future__ import annotations

from .exceptions import (
    DeviceError,
    DeviceUnavailableError,
    DeviceWriteError,
    EncodingDegradation,
    InvalidReceiptError,
    NativeBridgeError,
    PrintError,
    TransportError,
    TransportRejectedError,
    TransportUnreachableError,
)
from .models import LineItem, ReceiptData, ScriptKind, TransportOutcome
from .schema import parse_receipt

__version__ = "0.1.0"

__all__ = [
    "DeviceError",
    "DeviceUnavailableError",
    "DeviceWriteError",
    "EncodingDegradation",
    "InvalidReceiptError",
    "LineItem",
    "NativeBridgeError",
    "PrintError",
    "ReceiptData",
    "ScriptKind",
    "TransportError",
    "TransportOutcome",
    "TransportRejectedError",
    "TransportUnreachableError",
    "__version__",
    "parse_receipt",
]
