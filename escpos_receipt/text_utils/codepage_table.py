"""Unicode to printer codepage byte table.

The vendor definition of CP864 only covers some Arabic presentation forms;
many letters lack their medial or final glyph. The table is built in two
passes:

1. Direct pairs parsed from the vendor codepage definition.
2. A gap-filling pass over the glyph-form table: every presentation form
   missing from pass 1 borrows the byte of a neighbouring form of the same
   letter, using the fixed priority in FALLBACK_PRIORITY.

The priority order was tuned against the vendor codepage in use and must be
kept as-is for printed receipts to stay compatible.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from importlib import resources
import json
import logging
from pathlib import Path
import re
from types import MappingProxyType

from ..models import GlyphFormRow

_LOGGER = logging.getLogger(__name__)

DATA_PACKAGE = "escpos_receipt.text_utils"
DATA_DIR = "data"
CP864_DEFINITION = "CP864.TXT"
GLYPH_FORMS = "arabic_glyph_forms.json"

_DEFINITION_LINE = re.compile(r"^\s*0x([0-9A-Fa-f]{1,2})\s+0x([0-9A-Fa-f]{1,6})\b")

# Candidate forms consulted, in order, when a form is missing
FALLBACK_PRIORITY: dict[str, tuple[str, ...]] = {
    "medial": ("initial", "final", "isolated"),
    "final": ("isolated", "initial"),
    "initial": ("medial", "isolated"),
    "isolated": ("final",),
}


def parse_codepage_definition(lines: Iterable[str]) -> dict[int, int]:
    """Parse ``0xAA 0xBBBB`` lines into a ``{codepoint: byte}`` map.

    Comments, blank lines and undefined entries are skipped. When a codepoint
    appears twice, the first byte wins.
    """
    table: dict[int, int] = {}
    for line in lines:
        match = _DEFINITION_LINE.match(line)
        if match is None:
            continue
        byte = int(match.group(1), 16)
        codepoint = int(match.group(2), 16)
        table.setdefault(codepoint, byte)
    return table


def _parse_codepoint(value: str | int | None) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


def parse_glyph_forms(data: Mapping[str, object]) -> list[GlyphFormRow]:
    """Build glyph-form rows from the decoded JSON document."""
    rows: list[GlyphFormRow] = []
    for raw in data.get("rows", []):  # type: ignore[union-attr]
        base = _parse_codepoint(raw["base"])
        if base is None:
            raise ValueError(f"Glyph row without base letter: {raw!r}")
        rows.append(
            GlyphFormRow(
                base=base,
                isolated=_parse_codepoint(raw.get("isolated")),
                initial=_parse_codepoint(raw.get("initial")),
                medial=_parse_codepoint(raw.get("medial")),
                final=_parse_codepoint(raw.get("final")),
                name=raw.get("name", ""),
            )
        )
    return rows


def load_glyph_forms(path: str | Path) -> list[GlyphFormRow]:
    """Load glyph-form rows from a JSON file."""
    with open(path, encoding="utf-8") as handle:
        return parse_glyph_forms(json.load(handle))


def fill_gaps(direct: Mapping[int, int], rows: Iterable[GlyphFormRow]) -> dict[int, int]:
    """Return ``direct`` extended with fallback bytes for missing forms.

    Availability is judged against the direct table only, so rows never see
    each other's fallbacks. A codepoint that is already mapped is never
    remapped.
    """
    table = dict(direct)
    for row in rows:
        forms = row.forms()
        available = {
            form: direct[codepoint]
            for form, codepoint in forms.items()
            if codepoint is not None and codepoint in direct
        }
        for form, codepoint in forms.items():
            if codepoint is None or codepoint in table:
                continue
            for candidate in FALLBACK_PRIORITY[form]:
                if candidate in available:
                    table[codepoint] = available[candidate]
                    _LOGGER.debug(
                        "Mapping missing %s U+%04X (%s) -> 0x%02X via %s",
                        form,
                        codepoint,
                        row.name or f"U+{row.base:04X}",
                        available[candidate],
                        candidate,
                    )
                    break
    return table


class CodepageTable(Mapping[int, int]):
    """Read-only ``{codepoint: byte}`` map for one printer codepage."""

    def __init__(self, mapping: Mapping[int, int], name: str = "") -> None:
        self._mapping = MappingProxyType(dict(mapping))
        self.name = name

    @classmethod
    def build(
        cls,
        definition_lines: Iterable[str],
        rows: Iterable[GlyphFormRow],
        name: str = "",
    ) -> CodepageTable:
        """Build the table from a vendor definition and glyph-form rows."""
        direct = parse_codepage_definition(definition_lines)
        table = fill_gaps(direct, rows)
        _LOGGER.debug(
            "Built codepage table %s: %d direct entries, %d after gap filling",
            name or "<unnamed>",
            len(direct),
            len(table),
        )
        return cls(table, name=name)

    @classmethod
    def from_files(
        cls, definition_path: str | Path, glyph_forms_path: str | Path, name: str = ""
    ) -> CodepageTable:
        """Build the table from files on disk."""
        with open(definition_path, encoding="utf-8") as handle:
            lines = handle.readlines()
        return cls.build(lines, load_glyph_forms(glyph_forms_path), name=name)

    def lookup(self, codepoint: int) -> int | None:
        """Return the byte for a codepoint, or None when unmapped."""
        return self._mapping.get(codepoint)

    def __getitem__(self, codepoint: int) -> int:
        return self._mapping[codepoint]

    def __iter__(self) -> Iterator[int]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"<CodepageTable {self.name or '<unnamed>'} entries={len(self)}>"


@lru_cache(maxsize=1)
def default_arabic_table() -> CodepageTable:
    """Return the packaged CP864 table (built once, then shared)."""
    data = resources.files(DATA_PACKAGE).joinpath(DATA_DIR)
    definition = data.joinpath(CP864_DEFINITION).read_text(encoding="utf-8")
    glyphs = json.loads(data.joinpath(GLYPH_FORMS).read_text(encoding="utf-8"))
    return CodepageTable.build(definition.splitlines(), parse_glyph_forms(glyphs), name="CP864")
