"""
ReadEasy web app - FastAPI backend.

Features:
- Proxy handlers relaying the combine-EPUBs API (/api/config, /api/combine-epubs)
- Article hand-off from the browser extension, returned as an EPUB download
- HTML preview of a received article

Run with: uvicorn --factory readeasy.webapp:create_app
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from .builder import package_article
from .config import AppConfig
from .exceptions import PackagingError, UpstreamError
from .http import forward_headers, relay_combine, relay_config
from .listener import ArticleListener, ListenerConfig, render_article, render_page
from .models import ArticlePayload
from .utils import epub_filename

log = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    config = config or AppConfig.from_env()
    listener = ArticleListener(ListenerConfig(list(config.allowed_extension_ids)))

    app = FastAPI(
        title="ReadEasy",
        description="Combine EPUBs and turn extension articles into EPUBs",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.config = config
    app.state.listener = listener

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/config")
    async def api_config():
        """Relay the upstream API limits (max files, max size)."""
        try:
            status, data = await run_in_threadpool(
                relay_config, config.api_base_url, timeout=config.request_timeout
            )
        except UpstreamError as e:
            return JSONResponse({"error": str(e)}, status_code=502)
        return JSONResponse(data, status_code=status)

    @app.post("/api/combine-epubs")
    async def api_combine(request: Request):
        """Relay the multipart upload unchanged and stream back whatever upstream answers."""
        body = await request.body()
        try:
            resp = await run_in_threadpool(
                relay_combine,
                config.api_base_url,
                body,
                dict(request.headers),
                timeout=config.request_timeout,
            )
        except UpstreamError as e:
            return PlainTextResponse(f"Upstream error: {e}", status_code=502)
        return Response(content=resp.body, status_code=resp.status, headers=forward_headers(resp.headers))

    async def _accept(request: Request) -> ArticlePayload:
        origin = request.headers.get("origin")
        if not listener.is_allowed_origin(origin):
            raise HTTPException(status_code=403, detail="Origin not allowed")
        try:
            data: Any = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Body must be JSON")
        payload = listener.handle_message(origin, data)
        if payload is None:
            raise HTTPException(status_code=422, detail="Ignored message")
        return payload

    @app.post("/api/article")
    async def api_article(request: Request):
        """Package an article message into an EPUB attachment."""
        payload = await _accept(request)
        try:
            data = await run_in_threadpool(package_article, payload)
        except PackagingError as e:
            log.error("packaging failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e))
        filename = epub_filename(payload.title or "")
        return Response(
            content=data,
            media_type="application/epub+zip",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/api/article/preview", response_class=HTMLResponse)
    async def api_article_preview(request: Request):
        payload = await _accept(request)
        article = await run_in_threadpool(render_article, payload)
        return render_page(article)

    return app
