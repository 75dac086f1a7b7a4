"""Extractor package: the three interchangeable HTML-to-artifact variants."""

from extractor.clean_text import CleanTextExtractor
from extractor.image_url import ImageUrlExtractor
from extractor.simplified_html import SimplifiedHtmlExtractor

__all__ = [
    "CleanTextExtractor",
    "ImageUrlExtractor",
    "SimplifiedHtmlExtractor",
]
