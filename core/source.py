"""Classify a source string as a URL or an inline HTML document."""

from __future__ import annotations

import re

from core.models import SourceKind


# "<" directly followed by a tag name, a closing slash, or a doctype/comment bang.
# Percent-encoded brackets (%3C) never match, so encoded URLs stay URLs.
_TAG_PATTERN = re.compile(r"<[A-Za-z/!]")


def is_html_source(source: object) -> bool:
    """Return True when the source contains a tag-like token."""
    if not isinstance(source, str):
        return False
    return _TAG_PATTERN.search(source) is not None


def classify_source(source: object) -> SourceKind:
    """
    Classify a source string.

    Total: every value maps to exactly one kind and nothing is raised.
    Anything without markup (including empty strings and non-strings) is a URL,
    left for the requestor to accept or reject.
    """
    if is_html_source(source):
        return SourceKind.HTML
    return SourceKind.URL
