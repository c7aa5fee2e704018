from __future__ import annotations

import re
import xml.sax.saxutils as xsu

_XML_QUOTES = {'"': "&quot;", "'": "&apos;"}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def xml_escape(s: str) -> str:
    """Escape &, <, >, " and ' for use in XML text or attribute values."""
    return xsu.escape(s, _XML_QUOTES)


def epub_filename(title: str) -> str:
    """Download filename for an article EPUB, derived from its title."""
    t = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower())
    t = re.sub(r"\s+", "_", t)
    t = t[:50]
    return (t or "article") + ".epub"


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[i]}"
