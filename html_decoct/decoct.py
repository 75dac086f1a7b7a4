"""HtmlDecoct facade: one source in, one extracted artifact out."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any
from uuid import uuid4

from core.config import DecoctConfig
from core.models import Outcome, SourceKind
from core.pipeline import ExtractError, Extractor, Requestor
from core.source import classify_source
from core.structured_logging import emit_json_event
from extractor import CleanTextExtractor, ImageUrlExtractor, SimplifiedHtmlExtractor
from fetcher import HttpRequestor


Callback = Callable[[Any, Any], None]
EventLogger = Callable[[str, dict[str, object]], None]


class HtmlDecoct:
    """
    Dispatch a URL or inline HTML source to one of three extractors.

    Usage:
        with HtmlDecoct() as decoct:
            outcome = decoct.get_clean_html("https://example.com").result()
            text = outcome.unwrap()

    Every public operation:
    1. classifies the source (URL vs inline HTML)
    2. URL only: requestor.request(source, call_id=...) → working document
    3. extractor.extract(document) → result
    4. calls ``callback(error, result)`` exactly once, then resolves the
       returned future with the same ``Outcome``

    Work always runs on the executor, never on the caller's thread. Errors
    from the requestor or extractor are delivered as-is; a failed fetch
    skips extraction.
    """

    def __init__(
        self,
        requestor: Requestor | None = None,
        simplified_html_extractor: Extractor | None = None,
        clean_text_extractor: Extractor | None = None,
        image_url_extractor: Extractor | None = None,
        executor: Executor | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        """Bind collaborators; defaults cover anything not injected."""
        self._owns_requestor = requestor is None
        if requestor is None:
            requestor = HttpRequestor()
        if simplified_html_extractor is None:
            simplified_html_extractor = SimplifiedHtmlExtractor()
        if clean_text_extractor is None:
            clean_text_extractor = CleanTextExtractor()
        if image_url_extractor is None:
            image_url_extractor = ImageUrlExtractor()
        self._requestor = requestor
        self._simplified_html_extractor = simplified_html_extractor
        self._clean_text_extractor = clean_text_extractor
        self._image_url_extractor = image_url_extractor

        self._owns_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=DecoctConfig.MAX_WORKERS,
                thread_name_prefix="html-decoct",
            )
        self._executor = executor
        self.event_logger = event_logger if event_logger is not None else self._default_event_logger

    @staticmethod
    def _default_event_logger(event_type: str, payload: dict[str, object]) -> None:
        """Default event sink writing to structured JSON stdout."""
        emit_json_event(event_type, **payload)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def get_simplified_html(self, source: str, callback: Callback | None = None) -> Future:
        """Simplified HTML tree of the source."""
        return self._submit("simplified_html", self._simplified_html_extractor, source, callback)

    def get_clean_html(self, source: str, callback: Callback | None = None) -> Future:
        """Cleaned plain text of the source."""
        return self._submit("clean_text", self._clean_text_extractor, source, callback)

    def get_images(self, source: str, callback: Callback | None = None) -> Future:
        """Image URLs referenced by the source."""
        return self._submit("image_urls", self._image_url_extractor, source, callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """Shut down the executor and HTTP requestor if this facade created them."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        if self._owns_requestor:
            self._requestor.close()

    def __enter__(self) -> "HtmlDecoct":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _emit(self, event_type: str, **payload: object) -> None:
        self.event_logger(event_type, dict(payload, component="decoct"))

    def _submit(
        self,
        operation: str,
        extractor: Extractor,
        source: str,
        callback: Callback | None,
    ) -> Future:
        call_id = str(uuid4())
        return self._executor.submit(self._run, call_id, operation, extractor, source, callback)

    def _run(
        self,
        call_id: str,
        operation: str,
        extractor: Extractor,
        source: str,
        callback: Callback | None,
    ) -> Outcome:
        outcome = self._resolve(call_id, operation, extractor, source)

        if callback is not None:
            try:
                callback(outcome.error, outcome.result)
            except Exception as exc:
                self._emit(
                    "decoct_callback_error",
                    call_id=call_id,
                    level="error",
                    operation=operation,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
        return outcome

    def _resolve(
        self,
        call_id: str,
        operation: str,
        extractor: Extractor,
        source: str,
    ) -> Outcome:
        """Run one source through classify → (request) → extract."""
        kind = classify_source(source)
        self._emit(
            "decoct_source_classified",
            call_id=call_id,
            operation=operation,
            source_kind=kind.value,
            source=source if kind is SourceKind.URL else None,
            source_length=len(source) if isinstance(source, str) else None,
        )

        if kind is SourceKind.URL:
            try:
                document = self._requestor.request(source, call_id=call_id)
            except Exception as exc:
                self._emit(
                    "decoct_fetch_failed",
                    call_id=call_id,
                    level="warning",
                    operation=operation,
                    source=source,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                return Outcome.failure(exc)
        else:
            document = source

        try:
            result = extractor.extract(document)
        except Exception as exc:
            self._emit(
                "decoct_extract_failed",
                call_id=call_id,
                level="warning",
                operation=operation,
                extractor=type(extractor).__name__,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return Outcome.failure(exc)

        if result is None:
            error = ExtractError(f"{type(extractor).__name__} returned no result")
            self._emit(
                "decoct_extract_failed",
                call_id=call_id,
                level="warning",
                operation=operation,
                extractor=type(extractor).__name__,
                error_type=type(error).__name__,
                error=str(error),
            )
            return Outcome.failure(error)

        self._emit(
            "decoct_completed",
            call_id=call_id,
            operation=operation,
            source_kind=kind.value,
            extractor=type(extractor).__name__,
        )
        return Outcome.success(result)
