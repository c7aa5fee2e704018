from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

DEFAULT_API_BASE_URL = "https://epub-combiner-api.onrender.com"


def _split_ids(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class AppConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    allowed_extension_ids: List[str] = field(default_factory=list)
    request_timeout: float = 60.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        base = (env.get("API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/")
        ids = _split_ids(env.get("READEASY_ALLOWED_EXTENSION_IDS", ""))
        timeout = env.get("READEASY_REQUEST_TIMEOUT")
        return cls(
            api_base_url=base,
            allowed_extension_ids=ids,
            request_timeout=float(timeout) if timeout else 60.0,
        )
