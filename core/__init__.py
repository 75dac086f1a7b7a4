"""Core module for html-decoct."""

from core.models import (
    FetchedDoc,
    FetchErrorCode,
    FetchLog,
    Outcome,
    SourceKind,
)
from core.config import DecoctConfig
from core.pipeline import ExtractError, Extractor, FetchError, Requestor
from core.source import classify_source, is_html_source

__all__ = [
    "FetchedDoc",
    "FetchErrorCode",
    "FetchLog",
    "Outcome",
    "SourceKind",
    "DecoctConfig",
    "ExtractError",
    "Extractor",
    "FetchError",
    "Requestor",
    "classify_source",
    "is_html_source",
]
