"""
Error taxonomy for the fetch/extract/transcode pipeline.

Failures are classified where they happen (fetcher, extractor) and mapped
to a caller-visible RequestError in exactly one place, the pipeline.
The status table below is the single source of truth for that mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Fetch failure kinds
TIMEOUT = "timeout"
REMOTE_ERROR = "remote_error"
NETWORK_ERROR = "network_error"

# Extraction failure kinds
NO_CONTENT_FOUND = "no_content_found"

# Request failure kinds
MISSING_PARAM = "missing_param"
INVALID_FORMAT = "invalid_format"
INVALID_URL = "invalid_url"
UNPROCESSABLE = "unprocessable"
INTERNAL_ERROR = "internal_error"
RATE_LIMITED = "rate_limited"

STATUS_BY_KIND: dict[str, int] = {
    MISSING_PARAM: 400,
    INVALID_FORMAT: 400,
    INVALID_URL: 400,
    TIMEOUT: 504,
    REMOTE_ERROR: 502,
    NETWORK_ERROR: 502,
    UNPROCESSABLE: 422,
    INTERNAL_ERROR: 500,
    RATE_LIMITED: 429,
}


@dataclass(frozen=True)
class FetchFailure:
    """Classified failure of an outbound fetch.

    Attributes:
        kind: One of "timeout", "remote_error", "network_error"
        message: Human-readable description
        status: Origin HTTP status for "remote_error", None otherwise
    """

    kind: str
    message: str
    status: int | None = None


class ExtractionError(Exception):
    """Raised when no readable content region can be isolated."""

    def __init__(self, message: str, kind: str = NO_CONTENT_FOUND):
        super().__init__(message)
        self.kind = kind
        self.message = message


class RequestError(Exception):
    """Caller-visible pipeline failure.

    Carries everything the HTTP layer needs to render a response:
    the error kind, a safe message, the status hint and optional details.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code if status_code is not None else STATUS_BY_KIND.get(kind, 500)
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.message,
            "kind": self.kind,
            "status": self.status_code,
        }
        payload.update(self.details)
        return payload

    def __repr__(self) -> str:
        return f"RequestError(kind={self.kind!r}, status_code={self.status_code}, message={self.message!r})"


def status_for_fetch_failure(failure: FetchFailure) -> int:
    """Map a fetch failure to the status returned to our own caller.

    An origin "not found" is propagated as not-found; every other
    origin status collapses into a generic upstream failure.
    """
    if failure.kind == REMOTE_ERROR and failure.status == 404:
        return 404
    return STATUS_BY_KIND.get(failure.kind, 502)
