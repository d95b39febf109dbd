from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from escpos_receipt.models import LineItem, ReceiptData
from escpos_receipt.printer import DeviceWriter
from escpos_receipt.text_utils import TextEncoder


@pytest.fixture
def encoder() -> TextEncoder:
    """Encoder backed by the packaged CP864 table."""
    return TextEncoder()


@pytest.fixture
def coffee_payload() -> dict[str, Any]:
    """Receipt body as posted by the POS front-end."""
    return {
        "storeName": "Cafe Beirut",
        "address": "Hamra St.",
        "phone": "01-234567",
        "orderId": "A-1001",
        "timestamp": "2024-03-05T14:07:09",
        "items": [{"name": "Coffee", "quantity": 2, "lineTotal": 5.0}],
        "subtotal": 5.0,
        "total": 5.0,
        "paymentMethod": "cash",
        "exchangeRate": 89500,
    }


@pytest.fixture
def coffee_receipt() -> ReceiptData:
    return ReceiptData(
        store_name="Cafe Beirut",
        order_id="A-1001",
        timestamp=datetime(2024, 3, 5, 14, 7, 9),
        items=(LineItem(name="Coffee", quantity=2, line_total=5.0),),
        subtotal=5.0,
        total=5.0,
        exchange_rate=89500,
    )


@pytest.fixture
def device_node(tmp_path: Path) -> Path:
    """A writable regular file standing in for /dev/usb/lp0."""
    node = tmp_path / "lp0"
    node.write_bytes(b"")
    return node


@pytest.fixture
def bound_writer(device_node: Path) -> Generator[DeviceWriter, None, None]:
    yield DeviceWriter([str(device_node)])


@pytest.fixture
def unbound_writer(tmp_path: Path) -> DeviceWriter:
    return DeviceWriter([str(tmp_path / "missing-lp0"), str(tmp_path / "missing-lp1")])
