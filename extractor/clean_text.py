"""Clean-text extractor: readable plain text from an HTML document."""

from __future__ import annotations

import trafilatura
from bs4 import BeautifulSoup

from core.config import DecoctConfig
from core.pipeline import ExtractError, Extractor


INVISIBLE_TAGS = ["head", "title", "script", "style", "noscript", "template"]
BLOCK_TAGS = [
    "p", "div", "section", "article", "li", "br", "tr",
    "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre",
]


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace inside lines; each non-empty line is a paragraph."""
    lines = (" ".join(line.split()) for line in value.splitlines())
    return "\n\n".join(line for line in lines if line)


def truncate_with_ellipsis(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    head, space, _ = text[: max_chars + 1].rpartition(" ")
    cut = head if space and head.strip() else text[:max_chars]
    return cut.rstrip() + "…"


def visible_text(html_text: str, parser: str = "html.parser") -> str:
    """Text a reader would see: invisible elements dropped, one line per block."""
    soup = BeautifulSoup(html_text, parser)
    for element in soup.find_all(INVISIBLE_TAGS):
        if not element.decomposed:
            element.decompose()
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before("\n")
        block.append("\n")
    return normalize_whitespace(soup.get_text())


class CleanTextExtractor(Extractor):
    """Convert an HTML document into cleaned plain text."""

    def __init__(
        self,
        include_tables: bool = DecoctConfig.CLEAN_TEXT_INCLUDE_TABLES,
        max_chars: int | None = None,
    ) -> None:
        """Initialize table policy and optional truncation length."""
        if max_chars is not None and max_chars <= 0:
            raise ValueError("max_chars must be > 0")
        self.include_tables = include_tables
        self.max_chars = max_chars

    def extract(self, html_text: str) -> str:
        """Return readable text; main content via trafilatura, visible text otherwise."""
        if not isinstance(html_text, str):
            raise ExtractError(f"expected HTML text, got {type(html_text).__name__}")
        if not html_text.strip():
            return ""

        try:
            extracted = trafilatura.extract(
                html_text,
                output_format="txt",
                include_comments=False,
                include_tables=self.include_tables,
            )
        except Exception as exc:
            raise ExtractError(f"text extraction failed: {exc}") from exc

        text = normalize_whitespace(extracted) if extracted else visible_text(html_text)
        if self.max_chars is not None:
            text = truncate_with_ellipsis(text, self.max_chars)
        return text
