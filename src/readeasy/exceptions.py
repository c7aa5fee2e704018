from __future__ import annotations


class ReadEasyError(Exception):
    """Base user-facing error for readeasy.

    Use this for predictable, actionable failures (bad selection, upstream down, etc.).
    CLI will catch this and print a concise message without a traceback.
    """


class PackagingError(ReadEasyError):
    """EPUB archive could not be serialized."""


class UpstreamError(ReadEasyError):
    """Network or HTTP failure talking to the combine API."""


class SelectionError(ReadEasyError):
    """User picked files the combine API would refuse (wrong type, too many, too large)."""
