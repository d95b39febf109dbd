"""Configuration dataclasses for the printer device."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..const import (
    DEFAULT_ARABIC_CODEPAGE,
    DEFAULT_DEVICE_PATHS,
    DEFAULT_LATIN_CODEPAGE,
    DEFAULT_LINE_WIDTH,
)


@dataclass
class DeviceConfig:
    """Printer device configuration."""

    device_paths: tuple[str, ...] = field(default=DEFAULT_DEVICE_PATHS)
    line_width: int = DEFAULT_LINE_WIDTH
    latin_codepage: str = DEFAULT_LATIN_CODEPAGE
    arabic_codepage: str = DEFAULT_ARABIC_CODEPAGE
