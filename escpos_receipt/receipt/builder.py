"""Receipt layout: ReceiptData in, ordered ESC/POS commands out.

The layout below is the visual contract of the printed receipt; keep the
order of sections stable. The builder is pure: no I/O, no clock reads beyond
formatting the timestamp it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging

from ..const import (
    DEFAULT_ARABIC_CODEPAGE_NUMBER,
    DEFAULT_FOOTER,
    DEFAULT_ITEM_NAME,
    DEFAULT_LINE_WIDTH,
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_STORE_NAME,
)
from ..currency import CurrencyFormat
from ..models import LineItem, ReceiptData
from ..text_utils import TextEncoder
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
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptLayout:
    """Fixed parameters of the printed receipt."""

    line_width: int = DEFAULT_LINE_WIDTH
    codepage_number: int = DEFAULT_ARABIC_CODEPAGE_NUMBER
    footer: str = DEFAULT_FOOTER
    trailing_feeds: int = 3
    currency: CurrencyFormat = field(default_factory=CurrencyFormat)

    @property
    def divider(self) -> str:
        return "-" * self.line_width


def format_quantity(quantity: float) -> str:
    """Render 2.0 as ``2`` and 0.5 as ``0.5``."""
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def format_timestamp(timestamp: datetime) -> str:
    """Render a timestamp the way the till displays it, in local time."""
    local = timestamp.astimezone() if timestamp.tzinfo is not None else timestamp
    return f"{local.month}/{local.day}/{local.year}, {local.strftime('%I:%M:%S %p').lstrip('0')}"


def justify(left: str, right: str, width: int) -> str:
    """Return ``left`` and ``right`` on one line exactly ``width`` columns wide.

    At least one space separates the parts; when they do not fit, the left
    part is truncated. A right part wider than the line is cut at its end so
    a leading currency symbol survives.
    """
    room = width - len(right) - 1
    if room < 0:
        return right[:width]
    if len(left) > room:
        left = left[:room]
    return left + " " * (width - len(left) - len(right)) + right


class ReceiptDocumentBuilder:
    """Lay out a receipt as a sequence of printer commands."""

    def __init__(self, encoder: TextEncoder | None = None, layout: ReceiptLayout | None = None) -> None:
        self._encoder = encoder if encoder is not None else TextEncoder()
        self._layout = layout if layout is not None else ReceiptLayout()

    @property
    def layout(self) -> ReceiptLayout:
        return self._layout

    def item_detail_line(self, item: LineItem, rate: float) -> str:
        """Return the ``" 2 @ $2.50/225,000 ...  $5.00/450,000"`` line."""
        currency = self._layout.currency
        left = f" {format_quantity(item.quantity)} @ {currency.dual(item.unit_price, rate)}"
        right = currency.dual(item.line_total, rate)
        return justify(left, right, self._layout.line_width)

    def build(self, receipt: ReceiptData) -> list[PrinterCommand]:
        """Return the ordered command sequence for a receipt."""
        layout = self._layout
        currency = layout.currency
        rate = receipt.exchange_rate
        commands: list[PrinterCommand] = []

        def text(value: str) -> None:
            commands.append(RawBytes(self._encoder.encode(value)))

        def line(value: str) -> None:
            text(value)
            commands.append(Feed())

        def divider() -> None:
            line(layout.divider)

        # Printer setup
        commands.extend([Init(), KanjiOff(), SetCodepage(layout.codepage_number)])

        # Header
        commands.extend([Align(Alignment.CENTER), Bold(True), Size(TextSize.DOUBLE)])
        line(receipt.store_name or DEFAULT_STORE_NAME)
        commands.extend([Size(TextSize.NORMAL), Bold(False)])
        if receipt.address:
            line(receipt.address)
        if receipt.phone:
            line(receipt.phone)
        divider()

        # Order info
        commands.append(Align(Alignment.LEFT))
        line(f"Order #: {receipt.order_id}")
        line(f"Date: {format_timestamp(receipt.timestamp)}")
        divider()

        commands.append(Bold(True))
        text("Item Details")
        commands.extend([Bold(False), Feed()])
        divider()

        # Items
        for item in receipt.items:
            commands.append(Bold(True))
            text(item.name or DEFAULT_ITEM_NAME)
            commands.extend([Bold(False), Feed()])
            line(self.item_detail_line(item, rate))
            commands.append(Feed())

        # Totals
        divider()
        commands.append(Align(Alignment.RIGHT))
        line(f"Subtotal: {currency.primary(receipt.subtotal)}")
        line(f"{currency.secondary(receipt.subtotal, rate)} {currency.secondary_code}")
        if receipt.discount:
            line(f"Discount: -{currency.primary(receipt.discount)}")
        if receipt.tax:
            line(f"Tax: {currency.primary(receipt.tax)}")

        commands.extend([Feed(), Bold(True), Size(TextSize.DOUBLE)])
        line(f"TOTAL: {currency.primary(receipt.total)}")
        text(f"{currency.secondary(receipt.total, rate)} {currency.secondary_code}")
        commands.extend([Size(TextSize.NORMAL), Bold(False), Feed()])

        # Payment
        divider()
        line(f"Payment: {(receipt.payment_method or DEFAULT_PAYMENT_METHOD).upper()}")
        if receipt.cash_received:
            line(f"Cash: {currency.primary(receipt.cash_received)}")
            line(f"Change: {currency.primary(receipt.change or 0)}")

        # Footer
        commands.extend([Align(Alignment.CENTER), Feed()])
        line(receipt.footer_text or layout.footer)
        commands.append(Size(TextSize.NORMAL))
        line(currency.rate_disclosure(rate))

        commands.extend([Feed(layout.trailing_feeds), Cut()])

        _LOGGER.debug(
            "Built receipt %s: %d items, %d commands",
            receipt.order_id,
            len(receipt.items),
            len(commands),
        )
        return commands

    def render(self, receipt: ReceiptData) -> bytes:
        """Build and serialize a receipt into one ESC/POS payload."""
        return serialize(self.build(receipt))


def sample_receipt() -> ReceiptData:
    """Return the receipt printed by the test-print action."""
    return ReceiptData(
        store_name="TEST PRINT",
        order_id="TEST-001",
        timestamp=datetime.now(),
        items=(
            LineItem(name="شاورما دجاج", quantity=1, line_total=5.0),
            LineItem(name="Burger", quantity=2, line_total=16.0),
        ),
        subtotal=21.0,
        total=21.0,
        payment_method="CASH",
        footer_text="Printer Test",
    )
