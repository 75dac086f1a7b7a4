"""HTTP requestor: every URL it contacts, redirect hops included, passes one target policy."""

from __future__ import annotations

import hashlib
import socket
import time
from functools import lru_cache
from ipaddress import ip_address, ip_network
from urllib.parse import urljoin, urlsplit

import requests
from bs4 import UnicodeDammit

from core.config import DecoctConfig
from core.models import FetchErrorCode, FetchedDoc, FetchLog
from core.pipeline import FetchError, Requestor
from core.structured_logging import emit_model_event


_CHUNK_BYTES = 8192


class FetchAborted(Exception):
    """A fetch stopped by policy; ``code`` is what the caller sees."""

    code = FetchErrorCode.FETCH_ERROR


class UnsafeTarget(FetchAborted):
    """URL with a disallowed scheme, or a host resolving into a blocked range."""

    code = FetchErrorCode.SECURITY_BLOCKED


class RedirectBlocked(UnsafeTarget):
    """A redirect hop pointing at an unsafe target."""


class RedirectLimitExceeded(FetchAborted):
    code = FetchErrorCode.REDIRECT_LIMIT


class BodyLimitExceeded(FetchAborted):
    code = FetchErrorCode.BODY_TOO_LARGE


@lru_cache(maxsize=4)
def _networks(cidrs: tuple[str, ...]) -> tuple:
    return tuple(ip_network(cidr, strict=False) for cidr in cidrs)


def _resolve_ip_addresses(hostname: str) -> set[str]:
    """Every address ``hostname`` resolves to; empty when resolution fails."""
    try:
        infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    except socket.gaierror:
        return set()
    return {sockaddr[0] for *_, sockaddr in infos}


def check_target(url: object, rejected: type[UnsafeTarget] = UnsafeTarget) -> str:
    """
    Return the hostname of ``url`` if the requestor may contact it.

    Raises ``rejected`` for a non-string, a scheme outside ALLOWED_PROTOCOLS,
    or a host with any address in BLOCKED_IP_RANGES. A URL without a host
    raises a plain FetchAborted.
    """
    if not isinstance(url, str):
        raise rejected(f"URL must be a string, got {type(url).__name__}")

    parts = urlsplit(url)
    if parts.scheme.lower() not in DecoctConfig.ALLOWED_PROTOCOLS:
        raise rejected(f"scheme {parts.scheme or '(none)'!r} is not allowed")
    if not parts.hostname:
        raise FetchAborted("URL has no hostname")

    blocked = _networks(tuple(DecoctConfig.BLOCKED_IP_RANGES))
    for address in _resolve_ip_addresses(parts.hostname):
        if any(ip_address(address) in network for network in blocked):
            raise rejected(f"{parts.hostname} resolves to blocked address {address}")
    return parts.hostname


def _open(session: requests.Session, url: str) -> tuple[requests.Response, str]:
    """GET ``url`` by hand-followed redirects; every hop is re-checked."""
    headers = {"User-Agent": DecoctConfig.USER_AGENT, "Accept": "text/html,application/xhtml+xml"}
    hops = 0
    while True:
        response = session.get(
            url,
            headers=headers,
            timeout=DecoctConfig.FETCH_TIMEOUT_SECONDS,
            allow_redirects=False,
            stream=True,
        )
        location = response.headers.get("location")
        if not (300 <= response.status_code < 400 and location):
            return response, url

        response.close()
        if hops == DecoctConfig.MAX_REDIRECTS:
            raise RedirectLimitExceeded(f"more than {DecoctConfig.MAX_REDIRECTS} redirects")
        hops += 1
        url = urljoin(url, location)
        check_target(url, rejected=RedirectBlocked)


def _read_limited(response: requests.Response) -> bytes:
    """Stream the body, giving up once it passes the limit for its media type."""
    media_type = (response.headers.get("content-type") or "").partition(";")[0].strip().lower()
    limit = DecoctConfig.MAX_BODY_BYTES_BY_TYPE.get(media_type, DecoctConfig.MAX_BODY_BYTES_DEFAULT)
    if limit == 0:
        raise BodyLimitExceeded(f"{media_type} responses are disabled")

    body = bytearray()
    for chunk in response.iter_content(chunk_size=_CHUNK_BYTES):
        body.extend(chunk)
        if len(body) > limit:
            raise BodyLimitExceeded(f"{media_type or 'response'} body exceeds {limit} bytes")
    return bytes(body)


def _declared_charset(headers: dict[str, str]) -> str | None:
    _, _, params = headers.get("content-type", "").partition(";")
    for param in params.split(";"):
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return None


def decode_body(fetched: FetchedDoc) -> str:
    """Body text: declared charset first, then utf-8, then bs4's detection."""
    if not fetched.body_bytes:
        return ""
    declared = _declared_charset(fetched.headers)
    dammit = UnicodeDammit(
        fetched.body_bytes,
        known_definite_encodings=[declared] if declared else [],
        user_encodings=["utf-8"],
        is_html=True,
    )
    if dammit.unicode_markup is None:
        return fetched.body_bytes.decode("utf-8", errors="replace")
    return dammit.unicode_markup


def fetch_url(
    url: str,
    call_id: str | None = None,
    session: requests.Session | None = None,
) -> tuple[FetchedDoc | None, FetchLog]:
    """
    Fetch ``url`` under the target policy.

    Never raises for network or policy failures: the FetchLog carries the
    error code instead and the document is None. A session created here is
    closed before returning.
    """
    started = time.monotonic()
    http = session if session is not None else requests.Session()

    try:
        check_target(url)
        response, final_url = _open(http, url)
        try:
            body = _read_limited(response)
        finally:
            response.close()
    except FetchAborted as exc:
        code, message = exc.code, str(exc)
    except requests.Timeout as exc:
        code, message = FetchErrorCode.TIMEOUT, str(exc)
    except requests.RequestException as exc:
        code, message = FetchErrorCode.FETCH_ERROR, str(exc)
    else:
        latency_ms = int((time.monotonic() - started) * 1000)
        doc = FetchedDoc(
            status_code=response.status_code,
            final_url=final_url,
            headers={name.lower(): value for name, value in response.headers.items()},
            body_bytes=body,
            body_sha256=hashlib.sha256(body).hexdigest() if body else None,
            latency_ms=latency_ms,
        )
        return doc, FetchLog(
            url=url,
            status_code=response.status_code,
            latency_ms=latency_ms,
            bytes_received=len(body),
            call_id=call_id,
        )
    finally:
        if session is None:
            http.close()

    return None, FetchLog(
        url=url if isinstance(url, str) else repr(url),
        error_code=code,
        error_message=message,
        latency_ms=int((time.monotonic() - started) * 1000),
        call_id=call_id,
    )


class HttpRequestor(Requestor):
    """Requestor over one pooled requests.Session, one fetch log line per request."""

    def __init__(
        self,
        session: requests.Session | None = None,
        log_fetches: bool = True,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.log_fetches = log_fetches

    def close(self) -> None:
        self.session.close()

    def request(self, url: str, *, call_id: str | None = None) -> str:
        """Fetch one URL and return its decoded HTML text, raising FetchError on failure."""
        fetched_doc, fetch_log = fetch_url(url, call_id=call_id, session=self.session)
        if self.log_fetches:
            emit_model_event("fetch", fetch_log, level="warning" if fetch_log.error_code else "info")

        if fetched_doc is None:
            raise FetchError(fetch_log.error_message or "fetch failed", url=url, code=fetch_log.error_code)
        if fetched_doc.status_code >= 400:
            raise FetchError(
                f"HTTP {fetched_doc.status_code} for {fetched_doc.final_url}",
                url=url,
                code=FetchErrorCode.HTTP_ERROR,
                status_code=fetched_doc.status_code,
            )
        return decode_body(fetched_doc)
