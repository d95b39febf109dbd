"""Raw writer for the printer's device node."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import errno as errno_codes
import logging
import os
from typing import Any

from ..const import DEFAULT_DEVICE_PATHS
from ..exceptions import DeviceUnavailableError, DeviceWriteError

_LOGGER = logging.getLogger(__name__)

NO_DEVICE_MESSAGE = "No printer device available"
DISCONNECTED_MESSAGE = "Printer disconnected."

# errnos seen when the printer is unplugged or switched off mid-session
_DISCONNECT_ERRNOS = {errno_codes.ENODEV, errno_codes.ENXIO, errno_codes.EIO}


def probe_device_paths(candidates: Iterable[str]) -> str | None:
    """Return the first candidate path that exists and is writable."""
    for path in candidates:
        if os.path.exists(path) and os.access(path, os.W_OK):
            return path
        _LOGGER.debug("Printer device %s not accessible", path)
    return None


class DeviceWriter:
    """Writes ESC/POS payloads to a printer device node.

    The device is probed once, at construction. An unbound writer never
    re-probes; every write fails until a new writer is created.

    Writes are not serialized here. One writer owns one physical printer and
    its owner must keep a single write in flight at a time.
    """

    def __init__(self, candidates: Iterable[str] = DEFAULT_DEVICE_PATHS) -> None:
        self._candidates = tuple(candidates)
        self._device_path = probe_device_paths(self._candidates)
        self._last_write: datetime | None = None
        self._last_error: datetime | None = None
        self._last_error_reason: str | None = None
        self._last_error_errno: int | None = None
        self._bytes_written = 0
        if self._device_path:
            _LOGGER.info("Printer device found at %s", self._device_path)
        else:
            _LOGGER.warning(
                "No writable printer device found (tried %s); printing will fail",
                ", ".join(self._candidates) or "nothing",
            )

    @property
    def device_path(self) -> str | None:
        """Return the bound device node, or None."""
        return self._device_path

    @property
    def is_bound(self) -> bool:
        """Return True when a device node was found at construction."""
        return self._device_path is not None

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    def get_connection_info(self) -> str:
        """Return a human-readable connection info string."""
        return self._device_path or "NONE DETECTED"

    def write(self, data: bytes) -> None:
        """Write the whole payload to the device in one call.

        Raises:
            DeviceUnavailableError: No device node was found at startup.
            DeviceWriteError: The write failed or was cut short.
        """
        if self._device_path is None:
            raise DeviceUnavailableError(NO_DEVICE_MESSAGE)

        try:
            fd = os.open(self._device_path, os.O_WRONLY)
        except OSError as err:
            raise self._write_failed(err) from err
        try:
            written = os.write(fd, data)
        except OSError as err:
            raise self._write_failed(err) from err
        finally:
            os.close(fd)

        if written != len(data):
            self._record_error(f"Short write: {written} of {len(data)} bytes", None)
            raise DeviceWriteError(
                f"Printer accepted only {written} of {len(data)} bytes"
            )

        self._bytes_written += written
        self._last_write = datetime.now(timezone.utc)
        _LOGGER.debug("Wrote %d bytes to %s", written, self._device_path)

    def _write_failed(self, err: OSError) -> DeviceWriteError:
        self._record_error(str(err), err.errno)
        _LOGGER.warning("Write to %s failed: %s", self._device_path, err)
        if err.errno in _DISCONNECT_ERRNOS:
            return DeviceWriteError(DISCONNECTED_MESSAGE)
        return DeviceWriteError(f"Printer write failed: {err.strerror or err}")

    def _record_error(self, reason: str, errno: int | None) -> None:
        self._last_error = datetime.now(timezone.utc)
        self._last_error_reason = reason
        self._last_error_errno = errno

    def get_diagnostics(self) -> dict[str, Any]:
        """Return diagnostic information about the device."""
        def _iso(dt_obj: datetime | None) -> str | None:
            return dt_obj.isoformat() if dt_obj is not None else None

        return {
            "device_path": self._device_path,
            "candidates": list(self._candidates),
            "last_write": _iso(self._last_write),
            "last_error": _iso(self._last_error),
            "last_error_reason": self._last_error_reason,
            "last_error_errno": self._last_error_errno,
            "bytes_written": self._bytes_written,
        }
