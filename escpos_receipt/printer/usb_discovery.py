"""USB enumeration of attached thermal printers.

Used for diagnostics only: the receipt itself is written through the
kernel's usblp device node, not through libusb.
"""

from __future__ import annotations

import logging
from typing import Any

from ..const import THERMAL_PRINTER_VIDS

_LOGGER = logging.getLogger(__name__)


def _describe(device: Any) -> dict[str, Any]:
    info: dict[str, Any] = {
        "vendor_id": f"{device.idVendor:04X}",
        "product_id": f"{device.idProduct:04X}",
    }
    bus = getattr(device, "bus", None)
    address = getattr(device, "address", None)
    if bus is not None and address is not None:
        info["location"] = f"{bus}:{address}"
    return info


def find_usb_printers(vendor_ids: set[int] | None = None) -> list[dict[str, Any]]:
    """Return attached USB devices from known thermal printer vendors.

    Returns an empty list when pyusb has no usable backend (no libusb) or
    enumeration fails.
    """
    vids = vendor_ids if vendor_ids is not None else THERMAL_PRINTER_VIDS
    try:
        import usb.core  # noqa: PLC0415

        devices = usb.core.find(
            find_all=True,
            custom_match=lambda dev: dev.idVendor in vids,
        )
        found = [_describe(device) for device in devices or []]
    except Exception as err:
        _LOGGER.debug("USB enumeration unavailable: %s", err)
        return []
    _LOGGER.debug("Found %d USB thermal printer(s)", len(found))
    return found
