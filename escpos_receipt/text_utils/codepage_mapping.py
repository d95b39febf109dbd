"""Printer codepage names and the Python codecs behind them.

Printer manuals and POS front-ends spell the same table several ways
(``CP864``, ``PC864``, ``IBM864``, ``ISO_8859-6``); all of them resolve to one
codec name here.
"""

from __future__ import annotations

import codecs
import re

_ALIASES: dict[str, str] = {
    "LATIN1": "latin-1",
    "UTF8": "utf-8",
    "UTF-8": "utf-8",
}

_IBM_NAME = re.compile(r"^(?:CP|PC|IBM)[-_ ]?(\d{3,4})$")
_ISO_NAME = re.compile(r"^ISO[-_ ]?8859[-_ ]?(\d{1,2})$")


def get_codec_name(codepage: str) -> str:
    """Get the Python codec name for a printer codepage name.

    Args:
        codepage: Codepage name (e.g. "CP437", "PC864", "ISO_8859-6").

    Returns:
        Codec name. Unrecognised names are returned lower-cased.
    """
    name = codepage.strip().upper()
    if name in _ALIASES:
        return _ALIASES[name]
    match = _IBM_NAME.match(name)
    if match:
        return f"cp{match.group(1)}"
    match = _ISO_NAME.match(name)
    if match:
        return f"iso-8859-{match.group(1)}"
    return codepage.strip().lower()


def resolve_codec(codepage: str) -> str:
    """Return a codec name that Python can actually encode with.

    Raises:
        LookupError: If no codec exists for the codepage.
    """
    codec = get_codec_name(codepage)
    codecs.lookup(codec)
    return codec
