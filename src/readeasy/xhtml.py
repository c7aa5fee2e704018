from __future__ import annotations

import logging
import re
from typing import List

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .sanitizer import body_markup, parse_document
from .utils import xml_escape

log = logging.getLogger(__name__)

STRIP_TAGS = ("script", "style", "iframe", "object", "embed")
VOID_TAGS = ("br", "hr", "img", "input", "meta", "link")

_RE_START_TAG = re.compile(r"<([a-zA-Z][\w:.-]*)([^<>]*?)\s*(/?)>")
_RE_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*(?::[A-Za-z_][\w.\-]*)?$")

XLINK_NS = "http://www.w3.org/1999/xlink"
BOUND_PREFIXES = ("xml", "xmlns", "xlink")
FOREIGN_NS = {
    "svg": "http://www.w3.org/2000/svg",
    "math": "http://www.w3.org/1998/Math/MathML",
}
# &amp; &lt; &gt; &quot; &apos; and numeric references are already well-formed
_RE_BARE_AMP = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#[0-9]+|#[xX][0-9a-fA-F]+);)")


def _fix_start_tag(m: re.Match) -> str:
    name, attrs, slash = m.group(1), m.group(2), m.group(3)
    if name.lower() in VOID_TAGS:
        return f"<{name}{attrs} />"
    return f"<{name}{attrs}{' /' if slash else ''}>"


def repair_xhtml(markup: str) -> str:
    """Textual well-formedness repairs on serialized markup."""
    out = _RE_START_TAG.sub(_fix_start_tag, markup)
    out = out.replace("&nbsp;", "&#160;")
    out = _RE_BARE_AMP.sub("&amp;", out)
    return out


def _is_empty(value) -> bool:
    if isinstance(value, list):
        return not any(value)
    return value == ""


def _clean_names(body: Tag) -> None:
    """Make element and attribute names namespace-well-formed; drop empty attributes."""
    for tag in body.find_all(True):
        if ":" in tag.name or not _RE_XML_NAME.match(tag.name):
            tag.unwrap()
    for tag in [body] + body.find_all(True):
        for name in list(tag.attrs.keys()):
            low = name.lower()
            if not _RE_XML_NAME.match(name):
                del tag.attrs[name]
            elif ":" in name and name.split(":", 1)[0] not in BOUND_PREFIXES:
                del tag.attrs[name]
            elif low != "alt" and _is_empty(tag.attrs[name]):
                # alt="" is required on <img>
                del tag.attrs[name]
        if any(name.startswith("xlink:") for name in tag.attrs):
            tag.attrs.setdefault("xmlns:xlink", XLINK_NS)
        if tag.name in FOREIGN_NS and "xmlns" not in tag.attrs:
            tag.attrs["xmlns"] = FOREIGN_NS[tag.name]


def _serialize_children(body: Tag) -> str:
    parts: List[str] = []
    for child in body.contents:
        if isinstance(child, Tag):
            parts.append(child.decode())
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            if child.strip():
                parts.append(xml_escape(str(child)))
    return "".join(parts)


def to_xhtml(html_text: str) -> str:
    """Convert an HTML fragment into XHTML body content for an EPUB content document.

    Best effort: if serialization fails the raw inner markup is returned as-is.
    """
    soup = parse_document(html_text)
    for el in soup.find_all(list(STRIP_TAGS)):
        if not el.decomposed:
            el.decompose()
    for img in soup.find_all("img"):
        if "alt" not in img.attrs:
            img["alt"] = ""
    body = soup.body
    if body is None:
        return ""
    try:
        _clean_names(body)
        return repair_xhtml(_serialize_children(body))
    except Exception as e:  # noqa: BLE001
        log.warning("xhtml serialization failed, using raw markup: %s", e)
        return body_markup(soup)
