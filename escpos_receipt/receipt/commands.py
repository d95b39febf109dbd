"""ESC/POS printer commands and their serialization.

A receipt is described as an ordered list of PrinterCommand values. Keeping
the command list separate from its byte encoding lets the layout be tested
without caring about opcodes, and the opcodes be tested without a layout.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Union

from escpos.printer import Dummy

_LOGGER = logging.getLogger(__name__)

ESC = b"\x1b"
GS = b"\x1d"
FS = b"\x1c"
LF = b"\n"

HW_INIT = ESC + b"@"
KANJI_OFF = FS + b"."
CODEPAGE_SELECT = ESC + b"t"
ALIGN_SELECT = ESC + b"a"
BOLD_SELECT = ESC + b"E"
SIZE_SELECT = GS + b"!"
# GS V 65 n: feed n dots then partial cut
PAPER_FEED_CUT = GS + b"V" + b"\x41\x03"


class Alignment(Enum):
    """Text justification."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


class TextSize(Enum):
    """Character size (GS ! n)."""

    NORMAL = 0x00
    DOUBLE = 0x11


@dataclass(frozen=True)
class Init:
    """Reset the printer (ESC @)."""


@dataclass(frozen=True)
class KanjiOff:
    """Cancel double-byte Kanji mode (FS .)."""


@dataclass(frozen=True)
class SetCodepage:
    """Select a character code table (ESC t n)."""

    number: int


@dataclass(frozen=True)
class Align:
    """Set justification (ESC a n)."""

    alignment: Alignment


@dataclass(frozen=True)
class Bold:
    """Toggle emphasized mode (ESC E n)."""

    enabled: bool


@dataclass(frozen=True)
class Size:
    """Select character size (GS ! n)."""

    size: TextSize


@dataclass(frozen=True)
class Feed:
    """Print and feed ``lines`` lines."""

    lines: int = 1


@dataclass(frozen=True)
class Cut:
    """Feed and partially cut the paper (GS V 65 3)."""


@dataclass(frozen=True)
class RawBytes:
    """Already encoded bytes, usually text."""

    data: bytes


PrinterCommand = Union[Init, KanjiOff, SetCodepage, Align, Bold, Size, Feed, Cut, RawBytes]


def to_bytes(command: PrinterCommand) -> bytes:
    """Return the exact ESC/POS byte sequence for one command."""
    if isinstance(command, RawBytes):
        return command.data
    if isinstance(command, Feed):
        return LF * max(0, command.lines)
    if isinstance(command, Init):
        return HW_INIT
    if isinstance(command, KanjiOff):
        return KANJI_OFF
    if isinstance(command, SetCodepage):
        if not 0 <= command.number <= 255:
            raise ValueError(f"Codepage number out of range: {command.number}")
        return CODEPAGE_SELECT + bytes([command.number])
    if isinstance(command, Align):
        return ALIGN_SELECT + bytes([command.alignment.value])
    if isinstance(command, Bold):
        return BOLD_SELECT + (b"\x01" if command.enabled else b"\x00")
    if isinstance(command, Size):
        return SIZE_SELECT + bytes([command.size.value])
    if isinstance(command, Cut):
        return PAPER_FEED_CUT
    raise TypeError(f"Unknown printer command: {command!r}")


def serialize(commands: Iterable[PrinterCommand]) -> bytes:
    """Flatten a command sequence into one buffer.

    The buffer is accumulated in python-escpos' in-memory printer so the
    payload is exactly what a python-escpos backend would send.
    """
    printer = Dummy()
    count = 0
    for command in commands:
        printer._raw(to_bytes(command))
        count += 1
    output: bytes = printer.output
    _LOGGER.debug("Serialized %d commands into %d bytes", count, len(output))
    return output
