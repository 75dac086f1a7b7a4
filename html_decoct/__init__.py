"""html-decoct: simplified HTML, clean text or image URLs from a URL or an HTML string."""

from __future__ import annotations

from typing import Any

from html_decoct.decoct import HtmlDecoct

__version__ = "0.1.0"


def create_decoct(**overrides: Any) -> HtmlDecoct:
    """Build a facade with the default HTTP requestor and extractors, overriding any by keyword."""
    return HtmlDecoct(**overrides)


__all__ = ["HtmlDecoct", "create_decoct", "__version__"]
