"""Simplified-HTML extractor: a stripped-down structural copy of a document."""

from __future__ import annotations

from bs4 import BeautifulSoup, Comment
from bs4.element import Tag

from core.pipeline import ExtractError, Extractor


# Removed together with everything inside them.
DROPPED_TAGS = (
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "svg",
    "canvas",
    "form",
    "button",
    "input",
    "select",
    "textarea",
    "link",
    "meta",
)

# Structural tags kept as-is; anything else is unwrapped into its parent.
KEPT_TAGS = {
    "html", "head", "title", "body",
    "article", "main", "section", "header", "footer", "aside", "nav", "div",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "br", "hr", "blockquote", "pre", "code",
    "ul", "ol", "li", "dl", "dt", "dd",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
    "a", "img", "figure", "figcaption", "picture",
    "strong", "em", "b", "i", "sub", "sup",
}

ALLOWED_ATTRIBUTES: dict[str, set[str]] = {
    "a": {"href", "title"},
    "img": {"src", "alt", "title"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
}

# Dropped when nothing meaningful is left inside after cleaning.
_PRUNABLE_TAGS = {
    "article", "main", "section", "header", "footer", "aside", "nav", "div",
    "p", "blockquote", "ul", "ol", "li", "dl", "dt", "dd", "figure", "figcaption",
    "h1", "h2", "h3", "h4", "h5", "h6", "strong", "em", "b", "i", "a",
}
_VOID_CONTENT_TAGS = ("img", "br", "hr")


def _is_empty(tag: Tag) -> bool:
    if tag.get_text(strip=True):
        return False
    return tag.find(_VOID_CONTENT_TAGS) is None


def simplify_tree(soup: BeautifulSoup) -> BeautifulSoup:
    """Simplify a parsed document in place and return it."""
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()

    for element in soup.find_all(DROPPED_TAGS):
        # Nested matches are already gone with their ancestor.
        if not element.decomposed:
            element.decompose()

    for element in soup.find_all(True):
        if element.name not in KEPT_TAGS:
            element.unwrap()
            continue
        allowed = ALLOWED_ATTRIBUTES.get(element.name, set())
        element.attrs = {
            name: value for name, value in element.attrs.items() if name in allowed
        }

    # Innermost first so a parent emptied by its children is pruned too.
    for element in reversed(soup.find_all(_PRUNABLE_TAGS)):
        if _is_empty(element):
            element.decompose()

    return soup


class SimplifiedHtmlExtractor(Extractor):
    """Convert an HTML document into a simplified BeautifulSoup tree."""

    def __init__(self, parser: str = "html.parser") -> None:
        self.parser = parser

    def extract(self, html_text: str) -> BeautifulSoup:
        """Parse and simplify; the returned tree renders back to HTML with str()."""
        if not isinstance(html_text, str):
            raise ExtractError(f"expected HTML text, got {type(html_text).__name__}")
        try:
            soup = BeautifulSoup(html_text, self.parser)
        except Exception as exc:
            raise ExtractError(f"HTML parsing failed: {exc}") from exc
        return simplify_tree(soup)
