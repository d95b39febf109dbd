"""Text utilities for printer codepage encoding.

This package turns receipt strings into bytes a CP864/CP437 thermal printer
can print:

- ``codepage_table`` builds the Unicode -> CP864 byte table from the vendor
  codepage definition plus a gap-filling pass over Arabic presentation forms.
- ``transcoding`` detects Arabic, shapes and reverses it, and maps each
  character through the table (or the Latin codepage for non-Arabic text).
"""

from __future__ import annotations

from .codepage_mapping import get_codec_name, resolve_codec
from .codepage_table import (
    FALLBACK_PRIORITY,
    CodepageTable,
    default_arabic_table,
    fill_gaps,
    load_glyph_forms,
    parse_codepage_definition,
    parse_glyph_forms,
)
from .transcoding import (
    CharAnalysis,
    TextEncoder,
    detect_script,
    shape_arabic,
    visual_order,
)

__all__ = [
    "FALLBACK_PRIORITY",
    "CharAnalysis",
    "CodepageTable",
    "TextEncoder",
    "default_arabic_table",
    "detect_script",
    "fill_gaps",
    "get_codec_name",
    "load_glyph_forms",
    "parse_codepage_definition",
    "parse_glyph_forms",
    "resolve_codec",
    "shape_arabic",
    "visual_order",
]
