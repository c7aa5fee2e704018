"""Receiving side of the ReadEasy browser extension hand-off.

The extension opens the web app and posts one ``readeasy-article`` message to
it. Only messages coming from an allowed ``chrome-extension://`` origin and
carrying the expected payload shape are accepted; everything else is dropped
without surfacing an error.
"""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .models import ArticlePayload
from .sanitizer import sanitize_html

log = logging.getLogger(__name__)

EXTENSION_SCHEME = "chrome-extension://"
DEFAULT_DOCUMENT_TITLE = "ReadEasy Article"


@dataclass(frozen=True)
class ListenerConfig:
    allowed_extension_ids: List[str] = field(default_factory=list)

    @property
    def allowed_origins(self) -> List[str]:
        return [f"{EXTENSION_SCHEME}{ext_id}" for ext_id in self.allowed_extension_ids]


@dataclass(frozen=True)
class RenderedArticle:
    document_title: str
    base_href: Optional[str]
    markup: str


class ArticleListener:
    def __init__(self, config: Optional[ListenerConfig] = None):
        self.config = config or ListenerConfig()

    def is_allowed_origin(self, origin: Optional[str]) -> bool:
        if not origin:
            return False
        allowed = self.config.allowed_origins
        if not allowed:
            return origin.startswith(EXTENSION_SCHEME)
        return origin in allowed

    def handle_message(self, origin: Optional[str], data: Any) -> Optional[ArticlePayload]:
        if not self.is_allowed_origin(origin):
            log.debug("ignoring message from origin %r", origin)
            return None
        payload = ArticlePayload.from_message(data)
        if payload is None:
            log.debug("ignoring message with unexpected shape from %r", origin)
        return payload


def render_article(payload: ArticlePayload) -> RenderedArticle:
    safe_html = sanitize_html(payload.html or "", payload.source_url)
    parts = ['<article class="readeasy-article">']
    if payload.title:
        parts.append(f'<h1 class="readeasy-title">{html.escape(payload.title)}</h1>')
    if payload.byline:
        parts.append(f'<div class="readeasy-byline">{html.escape(payload.byline)}</div>')
    if payload.site_name:
        parts.append(f'<div class="readeasy-site">{html.escape(payload.site_name)}</div>')
    parts.append(f'<div class="readeasy-body">{safe_html}</div>')
    parts.append("</article>")
    return RenderedArticle(
        document_title=payload.title or DEFAULT_DOCUMENT_TITLE,
        base_href=payload.source_url,
        markup="\n".join(parts),
    )


def render_page(article: RenderedArticle) -> str:
    """Standalone HTML page around a rendered article."""
    base = f'<base href="{html.escape(article.base_href)}">\n' if article.base_href else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        f"{base}"
        "<meta charset=\"utf-8\">\n"
        f"<title>{html.escape(article.document_title)}</title>\n"
        "</head>\n"
        "<body>\n"
        f"<main id=\"articleRoot\">\n{article.markup}\n</main>\n"
        "</body>\n"
        "</html>\n"
    )
