"""
Default configuration for html-decoct.

These settings are class-level constants, validated once at import time.
Everything defaults to "safe" mode: only public http(s) hosts, bounded
redirects, bounded bodies.
"""

from typing import Set


_MARKUP_LIMIT = 5_000_000

# Loopback, private, link-local, shared, multicast and reserved space.
_NON_PUBLIC_V4 = [
    "0.0.0.0/8",
    "10.0.0.0/8",
    "100.64.0.0/10",        # carrier-grade NAT
    "127.0.0.0/8",
    "169.254.0.0/16",       # includes cloud metadata at 169.254.169.254
    "172.16.0.0/12",
    "192.168.0.0/16",
    "224.0.0.0/4",
    "255.255.255.255/32",
]
_NON_PUBLIC_V6 = [
    "::1/128",
    "::ffff:0:0/96",        # IPv4-mapped; would bypass the v4 list
    "fc00::/7",
    "fe80::/10",
    "ff00::/8",
]


class DecoctConfig:
    """
    Immutable settings shared by the facade, the HTTP requestor and the extractors.
    """

    # ========================================================================
    # Requestor
    # ========================================================================

    ALLOWED_PROTOCOLS: Set[str] = {"http", "https"}
    """Schemes the requestor will contact, for the first URL and every redirect."""

    BLOCKED_IP_RANGES: list[str] = _NON_PUBLIC_V4 + _NON_PUBLIC_V6
    """A host with any resolved address in these networks is SECURITY_BLOCKED."""

    MAX_REDIRECTS: int = 5
    """Hops followed before REDIRECT_LIMIT."""

    FETCH_TIMEOUT_SECONDS: int = 30
    """Connect/read timeout handed to requests."""

    MAX_BODY_BYTES_BY_TYPE: dict[str, int] = {
        "text/html": _MARKUP_LIMIT,
        "application/xhtml+xml": _MARKUP_LIMIT,
        "application/xml": _MARKUP_LIMIT,
        "text/xml": _MARKUP_LIMIT,
        "text/plain": 2_000_000,
        # 0 refuses the media type outright.
        "application/pdf": 0,
        "application/x-pdf": 0,
    }
    """Body limit per media type (parameters such as charset are ignored)."""

    MAX_BODY_BYTES_DEFAULT: int = 500_000
    """Body limit for media types not listed above."""

    USER_AGENT: str = "html-decoct/0.1 (+https://github.com/html-decoct/html-decoct)"

    # ========================================================================
    # Facade
    # ========================================================================

    MAX_WORKERS: int = 4
    """Worker threads of the facade's default executor."""

    # ========================================================================
    # Extraction
    # ========================================================================

    CLEAN_TEXT_INCLUDE_TABLES: bool = False
    """Whether clean-text extraction keeps table cell text."""

    @classmethod
    def validate(cls) -> None:
        """Raise ValueError naming the first constant that is out of range."""
        if not cls.ALLOWED_PROTOCOLS:
            raise ValueError("ALLOWED_PROTOCOLS must not be empty")
        if not cls.ALLOWED_PROTOCOLS <= {"http", "https"}:
            raise ValueError("ALLOWED_PROTOCOLS may only contain http and https")
        if cls.MAX_REDIRECTS < 0:
            raise ValueError("MAX_REDIRECTS must be >= 0")
        if cls.FETCH_TIMEOUT_SECONDS <= 0:
            raise ValueError("FETCH_TIMEOUT_SECONDS must be > 0")
        if cls.MAX_BODY_BYTES_DEFAULT <= 0:
            raise ValueError("MAX_BODY_BYTES_DEFAULT must be > 0")
        if any(limit < 0 for limit in cls.MAX_BODY_BYTES_BY_TYPE.values()):
            raise ValueError("All MAX_BODY_BYTES_BY_TYPE values must be >= 0")
        if cls.MAX_WORKERS < 1:
            raise ValueError("MAX_WORKERS must be >= 1")


DecoctConfig.validate()
