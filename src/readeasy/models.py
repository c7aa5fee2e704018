from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

ARTICLE_MESSAGE_TYPE = "readeasy-article"


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class ArticlePayload:
    html: str
    title: Optional[str] = None
    byline: Optional[str] = None
    site_name: Optional[str] = None
    source_url: Optional[str] = None
    type: str = ARTICLE_MESSAGE_TYPE

    @classmethod
    def from_message(cls, data: Any) -> Optional["ArticlePayload"]:
        """Build a payload from an inbound message, or None when it is not one of ours."""
        if not isinstance(data, Mapping):
            return None
        if data.get("type") != ARTICLE_MESSAGE_TYPE:
            return None
        html = data.get("html")
        if not isinstance(html, str):
            return None
        return cls(
            html=html,
            title=_opt_str(data.get("title")),
            byline=_opt_str(data.get("byline")),
            site_name=_opt_str(data.get("siteName")),
            source_url=_opt_str(data.get("sourceUrl")),
        )


@dataclass(frozen=True)
class ApiConfig:
    max_files: int = 10
    max_file_size: int = 50 * 1024 * 1024
    max_file_size_mb: Optional[float] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ApiConfig":
        max_files = int(data.get("maxFiles") or cls.max_files)
        max_file_size = int(data.get("maxFileSize") or cls.max_file_size)
        size_mb = data.get("maxFileSizeMB")
        if size_mb is None:
            size_mb = round(max_file_size / (1024 * 1024), 2)
        return cls(max_files=max_files, max_file_size=max_file_size, max_file_size_mb=float(size_mb))
