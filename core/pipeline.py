"""
Collaborator contracts for html-decoct.

The facade moves one source through at most two collaborators:
request (URL sources only) → extract

Both are plain synchronous calls that return a value or raise. The facade
owns scheduling and turns whatever they return or raise into one completion.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from core.models import FetchErrorCode


# ============================================================================
# Errors
# ============================================================================

class FetchError(Exception):
    """Raised by a Requestor when a URL could not be turned into HTML text."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        code: FetchErrorCode = FetchErrorCode.FETCH_ERROR,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.code = code
        self.status_code = status_code


class ExtractError(Exception):
    """Raised by an Extractor when a document cannot be turned into its artifact."""


# ============================================================================
# Collaborator Interfaces
# ============================================================================

class Requestor(ABC):
    """
    Request stage: given a URL, return the raw HTML text of the resource.

    Responsibilities:
    - Transport, redirects, decoding
    - Own timeout policy (the facade never cancels)
    """

    @abstractmethod
    def request(self, url: str, *, call_id: Optional[str] = None) -> str:
        """
        Fetch a single URL.

        Args:
            url: URL to fetch
            call_id: Facade call this fetch belongs to, for log correlation

        Returns:
            Decoded HTML text

        Raises:
            Exception: Any fetch failure (typically FetchError)
        """
        pass


class Extractor(ABC):
    """
    Extract stage: convert HTML text → one derived artifact.

    Variants are interchangeable; the result shape is variant-specific and
    opaque to the facade.
    """

    @abstractmethod
    def extract(self, html_text: str) -> Any:
        """
        Extract an artifact from an HTML document.

        Args:
            html_text: Full HTML document text

        Returns:
            Extractor-specific result (never None)

        Raises:
            Exception: Any extraction failure (typically ExtractError)
        """
        pass
