"""Validation schema for incoming receipt payloads."""

from __future__ import annotations

from datetime import datetime
import logging
import math
from typing import Any

import voluptuous as vol

from .const import (
    ATTR_ADDRESS,
    ATTR_CASH_RECEIVED,
    ATTR_CHANGE,
    ATTR_DISCOUNT,
    ATTR_DISCOUNT_TOTAL,
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
from .exceptions import InvalidReceiptError
from .models import LineItem, ReceiptData

_LOGGER = logging.getLogger(__name__)


def _finite(value: float) -> float:
    """Reject NaN and infinities, which cannot be priced or converted."""
    if not math.isfinite(value):
        raise vol.Invalid(f"expected a finite number, got {value!r}")
    return value


def _optional_amount(value: Any) -> float | None:
    """Coerce an optional amount; empty strings and None become None."""
    if value is None or value == "":
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(f"expected a number, got {value!r}") from err
    return _finite(amount)


def _text(value: Any) -> str:
    """Coerce scalar values to text, the way the front-end stringifies them."""
    if value is None:
        raise vol.Invalid("expected text, got null")
    if isinstance(value, (dict, list)):
        raise vol.Invalid(f"expected text, got {type(value).__name__}")
    return str(value)


def _timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp, accepting a trailing 'Z'."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise vol.Invalid("expected an ISO timestamp")
    raw = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(raw)
    except ValueError as err:
        raise vol.Invalid(f"invalid timestamp {value!r}") from err


ITEM_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_NAME, default=DEFAULT_ITEM_NAME): vol.Any(None, _text),
        vol.Optional(ATTR_QUANTITY, default=0): vol.All(
            vol.Coerce(float), _finite, vol.Range(min=0)
        ),
        vol.Optional(ATTR_UNIT_TOTAL): _optional_amount,
        vol.Optional(ATTR_LINE_TOTAL): _optional_amount,
        # Older clients send the line total as "total"
        vol.Optional(ATTR_TOTAL): _optional_amount,
    },
    extra=vol.REMOVE_EXTRA,
)

RECEIPT_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_STORE_NAME, default=DEFAULT_STORE_NAME): vol.Any(None, _text),
        vol.Optional(ATTR_ADDRESS): vol.Any(None, _text),
        vol.Optional(ATTR_PHONE): vol.Any(None, _text),
        vol.Optional(ATTR_ORDER_ID, default=""): vol.Any(None, _text),
        vol.Optional(ATTR_TIMESTAMP): vol.Any(None, _timestamp),
        vol.Optional(ATTR_ITEMS, default=list): [ITEM_SCHEMA],
        vol.Optional(ATTR_SUBTOTAL, default=0): _optional_amount,
        vol.Optional(ATTR_DISCOUNT): _optional_amount,
        vol.Optional(ATTR_DISCOUNT_TOTAL): _optional_amount,
        vol.Optional(ATTR_TAX): _optional_amount,
        vol.Optional(ATTR_TOTAL, default=0): _optional_amount,
        vol.Optional(ATTR_PAYMENT_METHOD, default=DEFAULT_PAYMENT_METHOD): vol.Any(None, _text),
        vol.Optional(ATTR_CASH_RECEIVED): _optional_amount,
        vol.Optional(ATTR_CHANGE): _optional_amount,
        vol.Optional(ATTR_EXCHANGE_RATE, default=DEFAULT_EXCHANGE_RATE): vol.Any(
            None, vol.All(vol.Coerce(float), _finite, vol.Range(min=0, min_included=False))
        ),
        vol.Optional(ATTR_FOOTER_TEXT): vol.Any(None, _text),
    },
    extra=vol.REMOVE_EXTRA,
)


def _build_item(data: dict[str, Any]) -> LineItem:
    line_total = data.get(ATTR_LINE_TOTAL)
    if line_total is None:
        line_total = data.get(ATTR_TOTAL)
    return LineItem(
        name=data.get(ATTR_NAME) or DEFAULT_ITEM_NAME,
        quantity=data[ATTR_QUANTITY],
        unit_total=data.get(ATTR_UNIT_TOTAL),
        line_total=line_total or 0.0,
    )


def parse_receipt(payload: Any) -> ReceiptData:
    """Validate a JSON payload and build a ReceiptData from it.

    Args:
        payload: Decoded JSON body as sent by the POS front-end.

    Returns:
        The validated, immutable receipt.

    Raises:
        InvalidReceiptError: If the payload does not describe a receipt.
    """
    if not isinstance(payload, dict):
        raise InvalidReceiptError("Receipt payload must be a JSON object")
    try:
        data = RECEIPT_SCHEMA(payload)
    except vol.Invalid as err:
        _LOGGER.debug("Rejected receipt payload: %s", err)
        raise InvalidReceiptError(f"Invalid receipt: {err}") from err

    discount = data.get(ATTR_DISCOUNT_TOTAL)
    if discount is None:
        discount = data.get(ATTR_DISCOUNT)

    timestamp = data.get(ATTR_TIMESTAMP) or datetime.now()

    return ReceiptData(
        store_name=data.get(ATTR_STORE_NAME) or DEFAULT_STORE_NAME,
        address=data.get(ATTR_ADDRESS),
        phone=data.get(ATTR_PHONE),
        order_id=data.get(ATTR_ORDER_ID) or "",
        timestamp=timestamp,
        items=tuple(_build_item(item) for item in data[ATTR_ITEMS]),
        subtotal=data.get(ATTR_SUBTOTAL) or 0.0,
        tax=data.get(ATTR_TAX),
        total=data.get(ATTR_TOTAL) or 0.0,
        payment_method=data.get(ATTR_PAYMENT_METHOD) or DEFAULT_PAYMENT_METHOD,
        cash_received=data.get(ATTR_CASH_RECEIVED),
        change=data.get(ATTR_CHANGE),
        exchange_rate=data.get(ATTR_EXCHANGE_RATE) or DEFAULT_EXCHANGE_RATE,
        footer_text=data.get(ATTR_FOOTER_TEXT),
        discount=discount,
    )
