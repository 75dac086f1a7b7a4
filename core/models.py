"""
Core Pydantic models for html-decoct.

Design principles:
- The facade is stateless; every model here lives for one call at most
- Extraction results are opaque and never validated or copied
- Fetch outcomes are logged, never persisted
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Enums
# ============================================================================

class SourceKind(str, Enum):
    """What a source string was classified as."""
    URL = "url"
    HTML = "html"


class FetchErrorCode(str, Enum):
    """Why did a fetch fail?"""
    TIMEOUT = "TIMEOUT"
    SECURITY_BLOCKED = "SECURITY_BLOCKED"  # SSRF, IP blocklist, bad scheme
    FETCH_ERROR = "FETCH_ERROR"  # Network error
    HTTP_ERROR = "HTTP_ERROR"  # 4xx/5xx response
    BODY_TOO_LARGE = "BODY_TOO_LARGE"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"


# ============================================================================
# Outcome (single completion of a facade call)
# ============================================================================

class Outcome(BaseModel):
    """
    Result of one facade call: either an error or an extraction result.

    Exactly one of ``error`` / ``result`` is set. Both fields hold the
    collaborator's objects by identity; nothing is wrapped or converted.
    """
    model_config = ConfigDict(frozen=True)

    error: Optional[Any] = None
    result: Optional[Any] = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "Outcome":
        if (self.error is None) == (self.result is None):
            raise ValueError("Outcome requires exactly one of error or result")
        return self

    @classmethod
    def success(cls, result: Any) -> "Outcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: Any) -> "Outcome":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the result, or raise the error if this outcome failed."""
        if self.error is None:
            return self.result
        if isinstance(self.error, BaseException):
            raise self.error
        raise RuntimeError(str(self.error))


# ============================================================================
# Fetch / Network Logging
# ============================================================================

class FetchedDoc(BaseModel):
    """
    Raw HTTP response for one fetched URL.

    Headers are lower-cased; body is kept as bytes until the requestor decodes it.
    """
    status_code: int
    final_url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body_bytes: Optional[bytes] = None
    body_sha256: Optional[str] = None
    latency_ms: Optional[int] = None


class FetchLog(BaseModel):
    """
    Log entry for a single fetch operation.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str

    status_code: Optional[int] = None  # HTTP status
    latency_ms: Optional[int] = None  # Time to response
    bytes_received: Optional[int] = None

    error_code: Optional[FetchErrorCode] = None
    error_message: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    call_id: Optional[str] = None
