"""Client side of the combine-EPUBs workflow: pick files, check limits, upload."""
from __future__ import annotations

import contextlib
import logging
import os
from typing import Iterable, List, Optional

import requests

from .exceptions import SelectionError, UpstreamError
from .models import ApiConfig
from .utils import format_file_size

log = logging.getLogger(__name__)

MIN_FILES = 2


def is_epub(path: str) -> bool:
    return path.lower().endswith(".epub")


class EpubSelection:
    """Ordered list of EPUB files to combine, checked against the API's limits."""

    def __init__(self, config: Optional[ApiConfig] = None, *, size_fn=None):
        self.config = config or ApiConfig()
        self.size_fn = size_fn or os.path.getsize
        self.files: List[str] = []

    def add(self, paths: Iterable[str]) -> None:
        epubs = [p for p in paths if is_epub(p)]
        if not epubs:
            raise SelectionError("Please select only EPUB files")
        max_files = self.config.max_files
        if len(self.files) + len(epubs) > max_files:
            raise SelectionError(
                f"Maximum {max_files} files allowed. You can add {max_files - len(self.files)} more."
            )
        max_size = self.config.max_file_size
        for p in epubs:
            if self.size_fn(p) > max_size:
                raise SelectionError(
                    f'File "{os.path.basename(p)}" is too large. Maximum size is {format_file_size(max_size)}'
                )
        self.files.extend(epubs)

    def remove(self, index: int) -> None:
        del self.files[index]

    def clear(self) -> None:
        self.files = []

    @property
    def ready(self) -> bool:
        return len(self.files) >= MIN_FILES

    @property
    def button_label(self) -> str:
        n = len(self.files)
        if n == 0:
            return "Combine EPUBs"
        if n == 1:
            return "Add at least 1 more EPUB"
        return f"Combine {n} EPUBs"


def fetch_api_config(api_url: str, *, timeout: float = 30.0, session: Optional[requests.Session] = None) -> ApiConfig:
    http = session or requests
    try:
        resp = http.get(f"{api_url.rstrip('/')}/config", timeout=timeout)
    except requests.RequestException as e:
        raise UpstreamError(f"Connection failed: {e}") from e
    if not resp.ok:
        raise UpstreamError(f"HTTP {resp.status_code}")
    return ApiConfig.from_json(resp.json())


def _error_message(resp: requests.Response) -> str:
    fallback = f"HTTP {resp.status_code}"
    try:
        data = resp.json()
    except ValueError:
        return resp.text or fallback
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or fallback
    return fallback


def combine_epubs(
    api_url: str,
    paths: List[str],
    *,
    timeout: float = 300.0,
    session: Optional[requests.Session] = None,
) -> bytes:
    """Upload paths to {api_url}/combine-epubs and return the combined EPUB bytes."""
    if len(paths) < MIN_FILES:
        raise SelectionError(f"Please select at least {MIN_FILES} EPUB files")
    http = session or requests
    log.info("sending %d files to %s/combine-epubs", len(paths), api_url)
    with contextlib.ExitStack() as stack:
        files = [
            ("epubs", (os.path.basename(p), stack.enter_context(open(p, "rb")), "application/epub+zip"))
            for p in paths
        ]
        try:
            resp = http.post(f"{api_url.rstrip('/')}/combine-epubs", files=files, timeout=timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"Failed to combine EPUBs: {e}") from e
    if not resp.ok:
        raise UpstreamError(f"Failed to combine EPUBs: {_error_message(resp)}")
    log.info("combined EPUB size: %d bytes", len(resp.content))
    return resp.content
