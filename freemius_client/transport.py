"""
HTTP transport for the Freemius API.

Executes one logical request, retrying only on HTTP 429, and classifies the
outcome into a ``TransportResponse`` or one of the ``TransportError`` kinds.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import requests

from .body import serialize, to_body
from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_CONFIG,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
    HTTP_BAD_REQUEST,
    HTTP_TOO_MANY_REQUESTS,
)
from .exceptions import (
    ApiError,
    MalformedResponseError,
    RateLimitExhaustedError,
    TransportError,
    TransportFailure,
)


@dataclass
class TransportResponse:
    """Successful outcome of a request.

    ``data`` is the decoded JSON value for JSON responses, the untouched
    response bytes otherwise, or None for an empty body.
    """

    status_code: int
    data: Any
    content_type: str = ''

    @property
    def is_json(self) -> bool:
        return is_json_content_type(self.content_type)


@dataclass
class RetryState:
    """Attempt bookkeeping for a single logical request."""

    max_attempts: int
    retry_delay: float
    attempts: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts


def is_json_content_type(content_type: Optional[str]) -> bool:
    media_type = (content_type or '').split(';', 1)[0].strip().lower()
    return media_type == CONTENT_TYPE_JSON or media_type.endswith('+json')


class Transport:
    """
    Sends requests to the API base URL over a ``requests.Session``.

    Only rate limiting (HTTP 429) is retried, with a fixed delay between
    attempts. Connection errors, timeouts and API errors end the call
    immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_CONFIG['timeout'],
        max_attempts: int = DEFAULT_CONFIG['max_attempts'],
        retry_delay: float = DEFAULT_CONFIG['retry_delay'],
        user_agent: Optional[str] = DEFAULT_CONFIG['user_agent'],
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

        if session is not None:
            self.session = session
        else:
            self.session = requests.Session()
            if user_agent:
                self.session.headers[HEADER_USER_AGENT] = user_agent

    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Union[TransportResponse, TransportError]:
        """
        Execute a request and return its outcome without raising.

        Args:
            method: HTTP method
            path: Path below the base URL, query string included
            body: None, a JSON-serializable value, str/bytes, or a ``Body``
            headers: Request headers, typically the signed headers

        Returns:
            TransportResponse on success, otherwise the TransportError
            describing the failure
        """
        method = method.upper()
        url = self.base_url + path

        request_headers = dict(headers or {})
        data = serialize(to_body(body))
        if data:
            request_headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON

        state = RetryState(self.max_attempts, self.retry_delay)
        while True:
            state.attempts += 1
            try:
                response = self.session.request(
                    method,
                    url,
                    headers=request_headers,
                    data=data or None,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                failure = TransportFailure(f"HTTP request failed: {e}")
                failure.__cause__ = e
                return failure

            if response.status_code != HTTP_TOO_MANY_REQUESTS:
                return self._classify(response)

            if state.exhausted:
                return RateLimitExhaustedError(state.attempts)

            time.sleep(state.retry_delay)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TransportResponse:
        """
        Execute a request, raising on failure.

        Raises:
            ApiError: If the API rejected the request
            RateLimitExhaustedError: If every attempt was rate limited
            TransportFailure: If no usable response was received
        """
        outcome = self.send(method, path, body=body, headers=headers)
        if isinstance(outcome, TransportError):
            raise outcome
        return outcome

    def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        return self.request('GET', path, headers=headers)

    def post(self, path: str, body: Any = None, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        return self.request('POST', path, body=body, headers=headers)

    def put(self, path: str, body: Any = None, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        return self.request('PUT', path, body=body, headers=headers)

    def delete(self, path: str, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        return self.request('DELETE', path, headers=headers)

    def _classify(self, response: requests.Response) -> Union[TransportResponse, TransportError]:
        status = response.status_code
        content_type = response.headers.get(HEADER_CONTENT_TYPE, '')

        if not response.content:
            if status >= HTTP_BAD_REQUEST:
                return ApiError.from_response(status, None)
            return TransportResponse(status, None, content_type)

        if is_json_content_type(content_type):
            try:
                payload = response.json()
            except ValueError as e:
                failure = MalformedResponseError(f"Invalid JSON response from API: {e}")
                failure.__cause__ = e
                return failure

            if status >= HTTP_BAD_REQUEST:
                return ApiError.from_response(status, payload)
            return TransportResponse(status, payload, content_type)

        if status >= HTTP_BAD_REQUEST:
            return ApiError.from_response(status, None)
        return TransportResponse(status, response.content, content_type)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
