"""Exceptions raised by the receipt printing pipeline.

Every failure carries a human-readable message meant to be shown to the
cashier as-is. Nothing in the pipeline retries; callers decide whether to
offer a manual retry.
"""

from __future__ import annotations


class PrintError(Exception):
    """Base class for all printing failures."""


class EncodingDegradation(UserWarning):
    """Text could not be encoded faithfully and was degraded.

    Used as a warning category only; encoding never aborts a receipt.
    """


class InvalidReceiptError(PrintError):
    """The receipt payload failed validation."""


class DeviceError(PrintError):
    """Base class for printer device failures."""


class DeviceUnavailableError(DeviceError):
    """No accessible printer device node was found."""


class DeviceWriteError(DeviceError):
    """Writing to the bound device node failed or was incomplete."""


class TransportError(PrintError):
    """A print transport failed."""

    def __init__(self, transport: str, message: str) -> None:
        super().__init__(message)
        self.transport = transport
        self.message = message


class TransportUnreachableError(TransportError):
    """The agent or server could not be reached at all."""


class TransportRejectedError(TransportError):
    """The agent or server was reached but reported a failure."""


class NativeBridgeError(TransportError):
    """The host application's native bridge reported a failure."""
