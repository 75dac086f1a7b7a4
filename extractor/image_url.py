"""Image-URL extractor: every image referenced by an HTML document."""

from __future__ import annotations

from typing import Iterator, List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from core.pipeline import ExtractError, Extractor


_SKIPPED_SCHEMES = ("data:", "javascript:", "about:", "blob:")
_META_IMAGE_KEYS = (
    ("property", "og:image"),
    ("property", "og:image:url"),
    ("name", "twitter:image"),
    ("name", "twitter:image:src"),
)


def parse_srcset(value: str) -> List[str]:
    """Return the URL of each candidate in a srcset attribute."""
    urls: List[str] = []
    for candidate in value.split(","):
        parts = candidate.strip().split()
        if parts:
            urls.append(parts[0])
    return urls


def _is_image_meta(meta) -> bool:
    return any(meta.get(attr_name) == attr_value for attr_name, attr_value in _META_IMAGE_KEYS)


def _raw_image_urls(soup: BeautifulSoup) -> Iterator[str]:
    """Yield image references in document order."""
    for element in soup.find_all(["img", "source", "meta", "link"]):
        if element.name == "meta":
            if _is_image_meta(element) and element.get("content"):
                yield element["content"]
            continue
        if element.name == "link":
            rel = element.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if element.get("href") and "image_src" in (item.lower() for item in rel):
                yield element["href"]
            continue
        if element.name == "img":
            for attr in ("src", "data-src"):
                value = element.get(attr)
                if value:
                    yield value
        # <source> outside <picture> belongs to audio/video.
        elif element.find_parent("picture") is None:
            continue
        srcset = element.get("srcset")
        if srcset:
            yield from parse_srcset(srcset)


def extract_image_urls(html_text: str, parser: str = "html.parser") -> List[str]:
    """Extract de-duplicated image URLs, resolved against <base href> when present."""
    soup = BeautifulSoup(html_text, parser)
    base_tag = soup.find("base", href=True)
    base_url = base_tag["href"].strip() if base_tag else None

    seen = set()
    urls: List[str] = []
    for raw in _raw_image_urls(soup):
        value = raw.strip()
        if not value or value.lower().startswith(_SKIPPED_SCHEMES):
            continue
        if base_url:
            value = urljoin(base_url, value)
        if value not in seen:
            seen.add(value)
            urls.append(value)
    return urls


class ImageUrlExtractor(Extractor):
    """Convert an HTML document into the list of its image URLs."""

    def __init__(self, parser: str = "html.parser") -> None:
        self.parser = parser

    def extract(self, html_text: str) -> List[str]:
        if not isinstance(html_text, str):
            raise ExtractError(f"expected HTML text, got {type(html_text).__name__}")
        try:
            return extract_image_urls(html_text, parser=self.parser)
        except Exception as exc:
            raise ExtractError(f"image extraction failed: {exc}") from exc
