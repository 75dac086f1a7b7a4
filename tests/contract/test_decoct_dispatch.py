"""Contract tests for HtmlDecoct dispatch: classify → (request) → extract → one completion."""

from __future__ import annotations

import threading

import pytest

from core.models import FetchErrorCode, Outcome
from core.pipeline import ExtractError, Extractor, FetchError, Requestor
from html_decoct import HtmlDecoct


WAIT_SECONDS = 5

OPERATIONS = [
    ("get_simplified_html", "simplified_extractor"),
    ("get_clean_html", "clean_text_extractor"),
    ("get_images", "image_extractor"),
]
ALL_EXTRACTORS = ("simplified_extractor", "clean_text_extractor", "image_extractor")


def _call(decoct, operation: str, source: str, callback=None) -> Outcome:
    future = getattr(decoct, operation)(source, callback)
    return future.result(timeout=WAIT_SECONDS)


@pytest.mark.contract
@pytest.mark.parametrize(("operation", "bound"), OPERATIONS)
def test_url_source_extracts_when_requestor_succeeds(request, decoct, requestor, callback, operation, bound):
    """URL source: requestor once, bound extractor once with the fetched HTML."""
    requestor.html = "<html>X</html>"
    extractor = request.getfixturevalue(bound)

    outcome = _call(decoct, operation, "http://example.com", callback)

    assert requestor.calls == ["http://example.com"]
    assert extractor.calls == ["<html>X</html>"]
    assert callback.calls == [(None, extractor.result)]
    assert outcome.ok
    assert outcome.result is extractor.result


@pytest.mark.contract
@pytest.mark.parametrize(("operation", "bound"), OPERATIONS)
def test_url_source_short_circuits_when_requestor_fails(request, decoct, requestor, callback, operation, bound):
    """Fetch failure is delivered verbatim and extraction never runs."""
    error = FetchError("network down", url="http://example.com", code=FetchErrorCode.FETCH_ERROR)
    requestor.error = error
    extractor = request.getfixturevalue(bound)

    outcome = _call(decoct, operation, "http://example.com", callback)

    assert requestor.calls == ["http://example.com"]
    assert extractor.calls == []
    assert len(callback.calls) == 1
    delivered_error, delivered_result = callback.calls[0]
    assert delivered_error is error
    assert delivered_result is None
    assert outcome.error is error
    assert not outcome.ok


@pytest.mark.contract
@pytest.mark.parametrize(("operation", "bound"), OPERATIONS)
def test_html_source_skips_requestor(request, decoct, requestor, callback, operation, bound):
    """Inline HTML is extracted directly; the requestor is never touched."""
    extractor = request.getfixturevalue(bound)

    outcome = _call(decoct, operation, "<html>inline</html>", callback)

    assert requestor.calls == []
    assert extractor.calls == ["<html>inline</html>"]
    assert callback.calls == [(None, extractor.result)]
    assert outcome.result is extractor.result


@pytest.mark.contract
@pytest.mark.parametrize(("operation", "bound"), OPERATIONS)
def test_each_operation_binds_only_its_own_extractor(request, decoct, operation, bound):
    """Calling one operation never invokes the other two extractors."""
    _call(decoct, operation, "<div>content</div>")

    for name in ALL_EXTRACTORS:
        expected = 1 if name == bound else 0
        assert len(request.getfixturevalue(name).calls) == expected


@pytest.mark.contract
@pytest.mark.parametrize(("operation", "bound"), OPERATIONS)
def test_extractor_failure_is_delivered_verbatim(request, decoct, callback, operation, bound):
    """Extraction errors reach the caller unchanged, once."""
    error = ExtractError("cannot parse")
    request.getfixturevalue(bound).error = error

    outcome = _call(decoct, operation, "<p>broken</p>", callback)

    assert callback.calls == [(error, None)]
    assert outcome.error is error


@pytest.mark.contract
def test_arbitrary_extractor_exception_is_not_wrapped(decoct, clean_text_extractor, callback):
    """Non-ExtractError exceptions pass through untouched too."""
    error = KeyError("missing")
    clean_text_extractor.error = error

    outcome = _call(decoct, "get_clean_html", "<p>x</p>", callback)

    assert callback.calls == [(error, None)]
    assert outcome.error is error


@pytest.mark.contract
def test_extractor_returning_none_becomes_extract_error(decoct, image_extractor, callback, monkeypatch):
    """A None result would leave both fields empty, so it is reported as an error."""
    monkeypatch.setattr(image_extractor, "extract", lambda html_text: None)

    outcome = _call(decoct, "get_images", "<p>x</p>", callback)

    assert len(callback.calls) == 1
    error, result = callback.calls[0]
    assert isinstance(error, ExtractError)
    assert result is None
    assert outcome.error is error


@pytest.mark.contract
def test_callback_is_optional(decoct, simplified_extractor):
    """Without a callback the future still carries the outcome."""
    outcome = _call(decoct, "get_simplified_html", "<p>x</p>")

    assert outcome.result is simplified_extractor.result


@pytest.mark.contract
def test_same_url_for_two_operations_fetches_independently(decoct, requestor, clean_text_extractor, image_extractor):
    """Two operations on one URL each fetch once and keep their own results."""
    clean_future = decoct.get_clean_html("http://example.com")
    images_future = decoct.get_images("http://example.com")

    clean = clean_future.result(timeout=WAIT_SECONDS)
    images = images_future.result(timeout=WAIT_SECONDS)

    assert requestor.calls == ["http://example.com", "http://example.com"]
    assert clean.result is clean_text_extractor.result
    assert images.result is image_extractor.result
    assert clean_text_extractor.calls == [requestor.html]
    assert image_extractor.calls == [requestor.html]


@pytest.mark.contract
def test_html_path_runs_off_the_caller_thread(decoct, clean_text_extractor):
    """Even inline HTML is extracted on the executor, not synchronously."""
    _call(decoct, "get_clean_html", "<p>x</p>")

    assert clean_text_extractor.threads
    assert threading.get_ident() not in clean_text_extractor.threads


@pytest.mark.contract
def test_public_call_returns_before_the_fetch_completes(decoct, requestor, callback, monkeypatch):
    """The caller gets a pending future while the requestor is still working."""
    release = threading.Event()
    original_request = requestor.request

    def _blocking_request(url: str, *, call_id: str | None = None) -> str:
        release.wait(WAIT_SECONDS)
        return original_request(url, call_id=call_id)

    monkeypatch.setattr(requestor, "request", _blocking_request)

    future = decoct.get_images("http://example.com", callback)
    assert not future.done()
    assert callback.calls == []

    release.set()
    outcome = future.result(timeout=WAIT_SECONDS)
    assert outcome.ok
    assert len(callback.calls) == 1


@pytest.mark.contract
def test_concurrent_calls_do_not_share_documents(decoct, requestor, clean_text_extractor, monkeypatch):
    """Each call keeps its own working document under concurrency."""
    monkeypatch.setattr(requestor, "request", lambda url, call_id=None: f"<p>{url}</p>")
    monkeypatch.setattr(clean_text_extractor, "extract", lambda html_text: html_text.upper())

    urls = [f"http://example.com/{index}" for index in range(20)]
    futures = [decoct.get_clean_html(url) for url in urls]
    results = [future.result(timeout=WAIT_SECONDS).result for future in futures]

    assert results == [f"<P>{url.upper()}</P>" for url in urls]


@pytest.mark.contract
def test_raising_callback_is_called_once_and_surfaces_on_future(decoct, events):
    """A failing callback is not retried; its exception lands on the future."""
    calls = []

    def _bad_callback(error, result):
        calls.append((error, result))
        raise RuntimeError("callback boom")

    future = decoct.get_clean_html("<p>x</p>", _bad_callback)

    with pytest.raises(RuntimeError, match="callback boom"):
        future.result(timeout=WAIT_SECONDS)
    assert len(calls) == 1
    assert any(event_type == "decoct_callback_error" for event_type, _ in events)


@pytest.mark.contract
def test_events_follow_the_call_state_machine(decoct, requestor, events):
    """URL success emits classified then completed, sharing one call_id."""
    _call(decoct, "get_images", "http://example.com")

    assert [event_type for event_type, _ in events] == [
        "decoct_source_classified",
        "decoct_completed",
    ]
    classified, completed = (payload for _, payload in events)
    assert classified["source_kind"] == "url"
    assert classified["operation"] == "image_urls"
    assert classified["call_id"] == completed["call_id"]
    assert requestor.call_ids == [classified["call_id"]]


@pytest.mark.contract
def test_fetch_failure_event_is_emitted(decoct, requestor, events):
    """Failed fetch emits a warning event and no completion."""
    requestor.error = FetchError("network down", url="http://example.com")

    _call(decoct, "get_clean_html", "http://example.com")

    event_types = [event_type for event_type, _ in events]
    assert event_types == ["decoct_source_classified", "decoct_fetch_failed"]
    assert events[1][1]["level"] == "warning"
    assert events[1][1]["error_type"] == "FetchError"


class _FalsyExtractor(Extractor):
    """Extractor that is empty in a boolean context, like a sized container."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __len__(self) -> int:
        return 0

    def extract(self, html_text: str) -> list[str]:
        self.calls.append(html_text)
        return ["kept"]


class _FalsyRequestor(Requestor):
    def __init__(self) -> None:
        self.calls: list[str] = []

    def __bool__(self) -> bool:
        return False

    def request(self, url: str, *, call_id: str | None = None) -> str:
        self.calls.append(url)
        return "<p>from falsy requestor</p>"


@pytest.mark.contract
def test_falsy_injected_collaborators_are_kept(events):
    """Only None selects a default; a falsy collaborator is still the one used."""
    requestor = _FalsyRequestor()
    extractor = _FalsyExtractor()

    with HtmlDecoct(
        requestor=requestor,
        image_url_extractor=extractor,
        event_logger=lambda event_type, payload: events.append((event_type, payload)),
    ) as decoct:
        outcome = _call(decoct, "get_images", "http://example.com")

    assert outcome.result == ["kept"]
    assert requestor.calls == ["http://example.com"]
    assert extractor.calls == ["<p>from falsy requestor</p>"]
