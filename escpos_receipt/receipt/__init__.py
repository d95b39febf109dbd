"""Receipt document building for ESC/POS thermal printers.

``builder`` lays a ReceiptData out as an ordered list of printer commands;
``commands`` defines those commands and flattens them into the byte payload
sent to the device.
"""

from __future__ import annotations

from .builder import (
    ReceiptDocumentBuilder,
    ReceiptLayout,
    format_quantity,
    format_timestamp,
    justify,
    sample_receipt,
)
from .commands import (
    Align,
    Alignment,
    Bold,
    Cut,
    Feed,
    Init,
    KanjiOff,
    PrinterCommand,
    RawBytes,
    SetCodepage,
    Size,
    TextSize,
    serialize,
    to_bytes,
)

__all__ = [
    "Align",
    "Alignment",
    "Bold",
    "Cut",
    "Feed",
    "Init",
    "KanjiOff",
    "PrinterCommand",
    "RawBytes",
    "ReceiptDocumentBuilder",
    "ReceiptLayout",
    "SetCodepage",
    "Size",
    "TextSize",
    "format_quantity",
    "format_timestamp",
    "justify",
    "sample_receipt",
    "serialize",
    "to_bytes",
]
