"""
Custom exceptions for the Freemius API client.
"""

import datetime
import enum
from typing import Any, Dict, Optional, Union

from .constants import (
    DEFAULT_ERROR_CODE,
    DEFAULT_ERROR_MESSAGE,
    DEFAULT_ERROR_TYPE,
    HTTP_TOO_MANY_REQUESTS,
)


class ErrorKind(enum.Enum):
    """Outcome classes a failed request can end in."""

    API = "api"
    EXHAUSTED = "exhausted"
    INFRASTRUCTURE = "infrastructure"


class FreemiusClientError(Exception):
    """Base exception for Freemius client errors."""
    pass


class ConfigurationError(FreemiusClientError):
    """Raised when credentials or client configuration are invalid."""
    pass


class TransportError(FreemiusClientError):
    """Base for every terminal failure of a request.

    Instances are also returned as values by ``Transport.send``, so callers
    may branch on ``kind`` instead of catching subclasses.
    """

    kind: ErrorKind


class ApiError(TransportError):
    """The API understood the request and rejected it."""

    kind = ErrorKind.API

    def __init__(
        self,
        message: str = DEFAULT_ERROR_MESSAGE,
        code: Union[int, str] = DEFAULT_ERROR_CODE,
        type: str = DEFAULT_ERROR_TYPE,
        status_code: int = 0,
        timestamp: Optional[str] = None,
        result: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type
        self.status_code = status_code
        self.timestamp = timestamp or _utc_now()
        self.result = result

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> "ApiError":
        """
        Build an error from a decoded error envelope.

        Expected shape: ``{"error": {"type", "message", "code", "timestamp"}}``.
        Every field is optional.
        """
        error: Dict[str, Any] = {}
        if isinstance(payload, dict) and isinstance(payload.get('error'), dict):
            error = payload['error']

        return cls(
            message=error.get('message') or DEFAULT_ERROR_MESSAGE,
            code=error['code'] if error.get('code') is not None else DEFAULT_ERROR_CODE,
            type=error.get('type') or DEFAULT_ERROR_TYPE,
            status_code=status_code,
            timestamp=error.get('timestamp'),
            result=payload,
        )

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status_code}, code {self.code})"


class RateLimitExhaustedError(TransportError):
    """Raised when the API kept answering 429 until the retry budget ran out."""

    kind = ErrorKind.EXHAUSTED

    def __init__(self, attempts: int, status_code: int = HTTP_TOO_MANY_REQUESTS):
        super().__init__(f"Rate limited after {attempts} attempts")
        self.attempts = attempts
        self.status_code = status_code


class TransportFailure(TransportError):
    """Raised when no meaningful response could be obtained."""

    kind = ErrorKind.INFRASTRUCTURE


class MalformedResponseError(TransportFailure):
    """Raised when a response declared as JSON cannot be decoded."""
    pass


def _utc_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()
