"""readeasy public API (library-first).

Exports the article pipeline (sanitize, convert, package) and the combine
client. The CLI and web app are thin and delegate to these.
"""
from __future__ import annotations

from .models import ArticlePayload, ApiConfig
from .sanitizer import sanitize_html
from .xhtml import to_xhtml
from .builder import package_article, package_article_async
from .listener import ArticleListener, ListenerConfig, render_article
from .combine import EpubSelection, combine_epubs, fetch_api_config
from .config import AppConfig
from .utils import epub_filename, format_file_size
from .exceptions import ReadEasyError, PackagingError, UpstreamError, SelectionError

__all__ = [
    "ArticlePayload",
    "ApiConfig",
    "sanitize_html",
    "to_xhtml",
    "package_article",
    "package_article_async",
    "ArticleListener",
    "ListenerConfig",
    "render_article",
    "EpubSelection",
    "combine_epubs",
    "fetch_api_config",
    "AppConfig",
    "epub_filename",
    "format_file_size",
    "ReadEasyError",
    "PackagingError",
    "UpstreamError",
    "SelectionError",
]
