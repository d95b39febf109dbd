"""Transcoding of receipt text to printer-ready bytes.

The printer has no bidi support and CP864 has no notion of Arabic joining.
Arabic strings are therefore handled in three steps before they reach the
device:

1. Shaping: each letter is replaced by its contextual presentation form
   (isolated/initial/medial/final, lam-alef ligatures).
2. Reversal: the shaped string is reversed so right-to-left text comes out
   right on a tape that is only ever painted left-to-right.
3. Byte mapping: ASCII passes through, everything else goes through the
   gap-filled CodepageTable, then the codec's own substitution.

Strings without Arabic take the plain Latin codepage path.

Encoding never aborts a receipt: unmappable characters degrade to ``?`` and
a shaping failure falls back to the raw UTF-8 bytes of the input.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
import warnings

import arabic_reshaper

from ..const import DEFAULT_ARABIC_CODEPAGE, DEFAULT_LATIN_CODEPAGE, REPLACEMENT_BYTE
from ..exceptions import EncodingDegradation
from ..models import ScriptKind
from .codepage_mapping import resolve_codec
from .codepage_table import CodepageTable, default_arabic_table

_LOGGER = logging.getLogger(__name__)

_ARABIC_BLOCK = re.compile("[\u0600-\u06ff]")


def detect_script(text: str) -> ScriptKind:
    """Return ARABIC when the text contains any Arabic block character."""
    if text and _ARABIC_BLOCK.search(text):
        return ScriptKind.ARABIC
    return ScriptKind.LATIN


def shape_arabic(text: str) -> str:
    """Replace Arabic letters with their contextual presentation forms."""
    return arabic_reshaper.reshape(text)


def visual_order(text: str) -> str:
    """Shape and reverse Arabic text for a left-to-right only device."""
    return shape_arabic(text)[::-1]


@dataclass(frozen=True)
class CharAnalysis:
    """One character of a shaped string and the byte it maps to."""

    char: str
    codepoint: int
    mapped: int | None

    def describe(self) -> str:
        mapped = f"0x{self.mapped:02x}" if self.mapped is not None else "UNDEFINED"
        return f"Char: {self.char} | Code: {self.codepoint} (0x{self.codepoint:04x}) | Mapped: {mapped}"


class TextEncoder:
    """Encode receipt strings into bytes for the printer's codepages.

    Instances hold no mutable state after construction and can be shared
    between concurrent callers.
    """

    def __init__(
        self,
        table: CodepageTable | None = None,
        latin_codepage: str = DEFAULT_LATIN_CODEPAGE,
        arabic_codepage: str = DEFAULT_ARABIC_CODEPAGE,
    ) -> None:
        self._table = table if table is not None else default_arabic_table()
        self._latin_codec = resolve_codec(latin_codepage)
        self._arabic_codec = resolve_codec(arabic_codepage)

    @property
    def table(self) -> CodepageTable:
        """Return the Arabic codepage table."""
        return self._table

    def encode(self, text: str) -> bytes:
        """Encode a string into printer-ready bytes.

        Args:
            text: Text to encode, Latin, Arabic or mixed.

        Returns:
            The encoded bytes. Never raises for odd input.
        """
        if not text:
            return b""

        if detect_script(text) is ScriptKind.LATIN:
            return text.encode(self._latin_codec, errors="replace")

        try:
            visual = visual_order(text)
        except Exception:
            _LOGGER.exception("Arabic shaping failed, sending raw UTF-8 for %r", text)
            warnings.warn(
                f"Arabic shaping failed for {text!r}; printing raw UTF-8",
                EncodingDegradation,
                stacklevel=2,
            )
            return text.encode("utf-8", errors="replace")

        return bytes(self._encode_char(char) for char in visual)

    def _encode_char(self, char: str) -> int:
        codepoint = ord(char)
        if codepoint <= 0x7F:
            return codepoint
        mapped = self._table.lookup(codepoint)
        if mapped is not None:
            return mapped
        encoded = char.encode(self._arabic_codec, errors="replace")
        if not encoded:
            return REPLACEMENT_BYTE
        _LOGGER.debug("No table entry for U+%04X, codec gave 0x%02X", codepoint, encoded[0])
        return encoded[0]

    def analyze(self, text: str) -> list[CharAnalysis]:
        """Describe how each shaped character of a string maps to the table.

        Characters are reported in logical order (before reversal).
        """
        shaped = shape_arabic(text) if detect_script(text) is ScriptKind.ARABIC else text
        return [CharAnalysis(char, ord(char), self._table.lookup(ord(char))) for char in shaped]

    def unmappable_chars(self, text: str) -> list[str]:
        """Return unique characters of a string that will print as ``?``."""
        unmappable: list[str] = []
        arabic = detect_script(text) is ScriptKind.ARABIC
        candidates = shape_arabic(text) if arabic else text
        codec = self._arabic_codec if arabic else self._latin_codec
        for char in candidates:
            if char in unmappable or ord(char) <= 0x7F:
                continue
            if arabic and ord(char) in self._table:
                continue
            try:
                char.encode(codec)
            except UnicodeEncodeError:
                unmappable.append(char)
        return unmappable
