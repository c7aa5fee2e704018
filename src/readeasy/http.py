from __future__ import annotations

import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .exceptions import UpstreamError

log = logging.getLogger(__name__)

# Not forwarded in either direction; the local server sets its own.
HOP_HEADERS = {"host", "connection", "content-length", "transfer-encoding", "keep-alive"}


@dataclass
class RelayResponse:
    status: int
    headers: Dict[str, str]
    body: bytes


def _send(req: Request, timeout: float) -> RelayResponse:
    """Perform req, passing HTTP error statuses through as normal responses."""
    try:
        with contextlib.closing(urlopen(req, timeout=timeout)) as resp:
            return RelayResponse(resp.status, dict(resp.headers.items()), resp.read())
    except HTTPError as e:
        with contextlib.closing(e):
            return RelayResponse(e.code, dict(e.headers.items()) if e.headers else {}, e.read())
    except (URLError, OSError) as e:
        reason = getattr(e, "reason", e)
        log.warning("upstream request to %s failed: %s", req.full_url, reason)
        raise UpstreamError(str(reason)) from e


def forward_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in HOP_HEADERS}


def relay_config(base_url: str, *, timeout: float = 60.0) -> Tuple[int, Any]:
    """GET {base_url}/config and return (status, decoded JSON)."""
    req = Request(f"{base_url.rstrip('/')}/config", headers={"Accept": "application/json"})
    resp = _send(req, timeout)
    try:
        data = json.loads(resp.body.decode("utf-8"))
    except ValueError as e:
        raise UpstreamError(f"Invalid JSON from upstream config: {e}") from e
    return resp.status, data


def relay_combine(
    base_url: str,
    body: bytes,
    headers: Optional[Mapping[str, str]] = None,
    *,
    timeout: float = 60.0,
) -> RelayResponse:
    """POST the raw (multipart) body to {base_url}/combine-epubs unchanged."""
    req = Request(
        f"{base_url.rstrip('/')}/combine-epubs",
        data=body,
        headers=forward_headers(headers or {}),
        method="POST",
    )
    resp = _send(req, timeout)
    log.info("combine relay: upstream status %d, %d bytes", resp.status, len(resp.body))
    return resp
