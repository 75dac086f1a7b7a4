"""Fetcher subsystem: HTTP requestor with safety checks."""

from fetcher.http import HttpRequestor, check_target, decode_body, fetch_url

__all__ = [
    "HttpRequestor",
    "check_target",
    "decode_body",
    "fetch_url",
]
