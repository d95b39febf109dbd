"""Data model for receipts, glyph tables and print outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .const import (
    ATTR_ADDRESS,
    ATTR_CASH_RECEIVED,
    ATTR_CHANGE,
    ATTR_DISCOUNT,
    ATTR_EXCHANGE_RATE,
    ATTR_FOOTER_TEXT,
    ATTR_ITEMS,
    ATTR_LINE_TOTAL,
    ATTR_NAME,
    ATTR_ORDER_ID,
    ATTR_PAYMENT_METHOD,
    ATTR_PHONE,
    ATTR_QUANTITY,
    ATTR_STORE_NAME,
    ATTR_SUBTOTAL,
    ATTR_TAX,
    ATTR_TIMESTAMP,
    ATTR_TOTAL,
    ATTR_UNIT_TOTAL,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_ITEM_NAME,
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_STORE_NAME,
)


class ScriptKind(Enum):
    """Script detected in a string, decided once per string."""

    LATIN = "latin"
    ARABIC = "arabic"


@dataclass(frozen=True)
class GlyphFormRow:
    """Presentation forms of one Arabic base letter. Absent forms are None."""

    base: int
    isolated: int | None = None
    initial: int | None = None
    medial: int | None = None
    final: int | None = None
    name: str = ""

    def forms(self) -> dict[str, int | None]:
        """Return the four forms keyed by form name."""
        return {
            "isolated": self.isolated,
            "initial": self.initial,
            "medial": self.medial,
            "final": self.final,
        }


@dataclass(frozen=True)
class LineItem:
    """A single ordered product."""

    name: str = DEFAULT_ITEM_NAME
    quantity: float = 0
    unit_total: float | None = None
    line_total: float = 0.0

    @property
    def unit_price(self) -> float:
        """Return the unit price, derived from the line total when not given."""
        if self.unit_total is not None:
            return self.unit_total
        if self.quantity > 0:
            return self.line_total / self.quantity
        return 0.0


@dataclass(frozen=True)
class ReceiptData:
    """Immutable receipt handed to the builder and the transports."""

    store_name: str = DEFAULT_STORE_NAME
    address: str | None = None
    phone: str | None = None
    order_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    items: tuple[LineItem, ...] = ()
    subtotal: float = 0.0
    tax: float | None = None
    total: float = 0.0
    payment_method: str = DEFAULT_PAYMENT_METHOD
    cash_received: float | None = None
    change: float | None = None
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    footer_text: str | None = None
    discount: float | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body understood by the print agent and server."""
        return {
            ATTR_STORE_NAME: self.store_name,
            ATTR_ADDRESS: self.address,
            ATTR_PHONE: self.phone,
            ATTR_ORDER_ID: self.order_id,
            ATTR_TIMESTAMP: self.timestamp.isoformat(),
            ATTR_ITEMS: [
                {
                    ATTR_NAME: item.name,
                    ATTR_QUANTITY: item.quantity,
                    ATTR_UNIT_TOTAL: item.unit_total,
                    ATTR_LINE_TOTAL: item.line_total,
                }
                for item in self.items
            ],
            ATTR_SUBTOTAL: self.subtotal,
            ATTR_DISCOUNT: self.discount,
            ATTR_TAX: self.tax,
            ATTR_TOTAL: self.total,
            ATTR_PAYMENT_METHOD: self.payment_method,
            ATTR_CASH_RECEIVED: self.cash_received,
            ATTR_CHANGE: self.change,
            ATTR_EXCHANGE_RATE: self.exchange_rate,
            ATTR_FOOTER_TEXT: self.footer_text,
        }


@dataclass(frozen=True)
class TransportOutcome:
    """Result of one print attempt. Created per call and never persisted."""

    transport: str
    message: str | None = None
    success: bool = True

    @property
    def ok(self) -> bool:
        """Return True when the receipt was handed off successfully."""
        return self.success

    @classmethod
    def succeeded(cls, transport: str) -> TransportOutcome:
        """Build a success outcome."""
        return cls(transport=transport)

    @classmethod
    def failed(cls, transport: str, message: str) -> TransportOutcome:
        """Build a failure outcome."""
        return cls(transport=transport, message=message, success=False)
