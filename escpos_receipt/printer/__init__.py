"""Printer device access for ESC/POS thermal printers.

This package provides the raw device-node writer used by the print agent and
USB enumeration used for its diagnostics.
"""

from __future__ import annotations

from .config import DeviceConfig
from .device_writer import (
    DISCONNECTED_MESSAGE,
    NO_DEVICE_MESSAGE,
    DeviceWriter,
    probe_device_paths,
)
from .usb_discovery import find_usb_printers

__all__ = [
    "DISCONNECTED_MESSAGE",
    "NO_DEVICE_MESSAGE",
    "DeviceConfig",
    "DeviceWriter",
    "find_usb_printers",
    "probe_device_paths",
]
