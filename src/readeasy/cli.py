"""Command line entrypoint: package article messages, combine EPUBs, serve the web app."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .builder import package_article
from .combine import EpubSelection, combine_epubs, fetch_api_config
from .config import AppConfig
from .exceptions import ReadEasyError
from .models import ArticlePayload
from .utils import epub_filename, format_file_size


def _write(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(data)


def cmd_package(args: argparse.Namespace) -> int:
    with open(args.payload, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    payload = ArticlePayload.from_message(data)
    if payload is None:
        raise ReadEasyError(f"{args.payload}: not a readeasy-article message")
    out_path = args.output or epub_filename(payload.title or "")
    _write(out_path, package_article(payload))
    print(f"[✓] Wrote {out_path}")
    return 0


def cmd_combine(args: argparse.Namespace, config: AppConfig) -> int:
    api_url = args.api or config.api_base_url
    api_config = fetch_api_config(api_url)
    print(f"[+] Connected! Max files: {api_config.max_files}, Max size: {api_config.max_file_size_mb}MB per file")
    selection = EpubSelection(api_config)
    selection.add(args.files)
    if not selection.ready:
        raise ReadEasyError("Please select at least 2 EPUB files")
    print(f"[+] {selection.button_label} …")
    data = combine_epubs(api_url, selection.files, timeout=config.request_timeout)
    _write(args.output, data)
    print(f"[✓] Wrote {args.output} ({format_file_size(len(data))})")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:  # pragma: no cover
    import uvicorn

    uvicorn.run("readeasy.webapp:create_app", factory=True, host=args.host, port=args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:  # pragma: no cover
    ap = argparse.ArgumentParser(prog="readeasy", description="ReadEasy article-to-EPUB and EPUB combiner tools")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p_pkg = sub.add_parser("package", help="Build an EPUB from a readeasy-article JSON message")
    p_pkg.add_argument("payload", help="Path to message JSON")
    p_pkg.add_argument("-o", "--output", help="Output EPUB path (default: derived from the title)")

    p_comb = sub.add_parser("combine", help="Combine EPUB files through the combine API")
    p_comb.add_argument("files", nargs="+", help="EPUB files, in reading order")
    p_comb.add_argument("-o", "--output", default="combined.epub", help="Output EPUB path")
    p_comb.add_argument("--api", help="API base URL (default: $API_BASE_URL)")

    p_srv = sub.add_parser("serve", help="Run the web app")
    p_srv.add_argument("--host", default="127.0.0.1")
    p_srv.add_argument("--port", type=int, default=8000)

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "package":
            return cmd_package(args)
        if args.command == "combine":
            return cmd_combine(args, AppConfig.from_env())
        return cmd_serve(args)
    except ReadEasyError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 2
