"""Sanitizer for article HTML received from the browser extension.

Strips active content (scripts, embeds, forms, inline handlers, inline styles,
``javascript:`` links) and rewrites relative ``href``/``src``/``srcset`` values
to absolute URLs against the article's source URL.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

BLOCKED_TAGS = ("script", "iframe", "object", "embed", "form", "input", "button", "link", "meta")
URL_ATTRS = ("href", "src")

_RE_ABSOLUTE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:|//)")
_RE_EVENT_ATTR = re.compile(r"^on", re.I)
_RE_WS = re.compile(r"\s+")


def parse_document(html_text: str) -> BeautifulSoup:
    """Parse with html5lib so malformed markup is recovered the way browsers do."""
    return BeautifulSoup(html_text or "", "html5lib")


def body_markup(soup: BeautifulSoup) -> str:
    body = soup.body
    if body is None:
        return ""
    return body.decode_contents()


def is_absolute_url(value: str) -> bool:
    return bool(_RE_ABSOLUTE.match(value.strip()))


def resolve_url(value: str, base_url: str) -> Optional[str]:
    """Resolve value against base_url; None if either cannot form a URL."""
    try:
        if not urlsplit(base_url).scheme:
            return None
        return urljoin(base_url, value.strip())
    except ValueError:
        return None


def rewrite_srcset(srcset: str, base_url: str) -> Optional[str]:
    """Resolve each candidate of a srcset list.

    Returns the rewritten value, or None when no candidate survives.
    """
    entries: List[str] = []
    for candidate in srcset.split(","):
        chunk = candidate.strip()
        if not chunk:
            continue
        parts = _RE_WS.split(chunk, maxsplit=1)
        url = parts[0]
        descriptor = parts[1].strip() if len(parts) > 1 else ""
        if not is_absolute_url(url):
            resolved = resolve_url(url, base_url)
            if resolved is None:
                continue
            url = resolved
        entries.append(f"{url} {descriptor}" if descriptor else url)
    if not entries:
        return None
    return ", ".join(entries)


def _remove_tags(soup: BeautifulSoup, names: Iterable[str]) -> None:
    for el in soup.find_all(list(names)):
        if el.decomposed:
            continue
        el.decompose()


def _clean_attrs(tag, source_url: Optional[str]) -> None:
    for name in list(tag.attrs.keys()):
        low = name.lower()
        if _RE_EVENT_ATTR.match(low) or low == "style":
            del tag.attrs[name]
            continue
        if low not in URL_ATTRS:
            continue
        value = tag.attrs[name]
        if not isinstance(value, str):
            value = " ".join(value)
        if value.strip().lower().startswith("javascript:"):
            del tag.attrs[name]
            continue
        if value and source_url and not is_absolute_url(value):
            resolved = resolve_url(value, source_url)
            if resolved is not None:
                tag.attrs[name] = resolved

    if source_url and "srcset" in tag.attrs:
        rewritten = rewrite_srcset(tag.attrs["srcset"], source_url)
        if rewritten is None:
            del tag.attrs["srcset"]
        else:
            tag.attrs["srcset"] = rewritten


def sanitize_html(html_text: str, source_url: Optional[str] = None, *, profile: str = "full") -> str:
    """Return the sanitized body markup of html_text.

    Profiles:
      full     remove BLOCKED_TAGS, event handlers, inline styles and
               ``javascript:`` URLs; absolutize URLs against source_url.
      minimal  remove <script> and event handlers only.

    Never raises for malformed input.
    """
    soup = parse_document(html_text)
    if profile == "minimal":
        _remove_tags(soup, ("script",))
        for tag in soup.find_all(True):
            for name in list(tag.attrs.keys()):
                if _RE_EVENT_ATTR.match(name):
                    del tag.attrs[name]
        return body_markup(soup)

    _remove_tags(soup, BLOCKED_TAGS)
    for tag in soup.find_all(True):
        _clean_attrs(tag, source_url)
    out = body_markup(soup)
    log.debug("sanitized %d chars of html into %d chars", len(html_text or ""), len(out))
    return out
