"""
Shared pytest fixtures and configuration for html-decoct tests.
"""

from __future__ import annotations

import threading
from typing import Any

import pytest

from core.pipeline import Extractor, Requestor
from html_decoct import HtmlDecoct


# ============================================================================
# Collaborator doubles
# ============================================================================

class RecordingRequestor(Requestor):
    """Requestor double: records every URL and returns or raises a fixed value."""

    def __init__(self, html: str = "<html>some HTML</html>", error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[str] = []
        self.call_ids: list[str | None] = []
        self._lock = threading.Lock()

    def request(self, url: str, *, call_id: str | None = None) -> str:
        with self._lock:
            self.calls.append(url)
            self.call_ids.append(call_id)
        if self.error is not None:
            raise self.error
        return self.html


class RecordingExtractor(Extractor):
    """Extractor double: records every document and returns or raises a fixed value."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else {}
        self.error = error
        self.calls: list[str] = []
        self.threads: list[int] = []
        self._lock = threading.Lock()

    def extract(self, html_text: str) -> Any:
        with self._lock:
            self.calls.append(html_text)
            self.threads.append(threading.get_ident())
        if self.error is not None:
            raise self.error
        return self.result


class CallbackRecorder:
    """Callable that records each (error, result) it is invoked with."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, Any]] = []

    def __call__(self, error: Any, result: Any) -> None:
        self.calls.append((error, result))


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def requestor() -> RecordingRequestor:
    return RecordingRequestor()


@pytest.fixture
def simplified_extractor() -> RecordingExtractor:
    return RecordingExtractor(result={"kind": "simplified"})


@pytest.fixture
def clean_text_extractor() -> RecordingExtractor:
    return RecordingExtractor(result={"kind": "clean"})


@pytest.fixture
def image_extractor() -> RecordingExtractor:
    return RecordingExtractor(result={"kind": "images"})


@pytest.fixture
def events() -> list[tuple[str, dict[str, object]]]:
    return []


@pytest.fixture
def decoct(requestor, simplified_extractor, clean_text_extractor, image_extractor, events):
    """Facade wired entirely to recording doubles."""
    facade = HtmlDecoct(
        requestor=requestor,
        simplified_html_extractor=simplified_extractor,
        clean_text_extractor=clean_text_extractor,
        image_url_extractor=image_extractor,
        event_logger=lambda event_type, payload: events.append((event_type, payload)),
    )
    yield facade
    facade.close()


@pytest.fixture
def callback() -> CallbackRecorder:
    return CallbackRecorder()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "contract: facade and collaborator contract tests")
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
