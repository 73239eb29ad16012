"""
Freemius API client.

Ties together credentials, the request signer and the transport: paths are
resolved against the credential's scope, signed, and sent to the live or
sandbox API.
"""

import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode

from .constants import (
    API_ADDRESS,
    API_VERSION,
    DEFAULT_CONFIG,
    FORMAT,
    PING_PATH,
    SANDBOX_API_ADDRESS,
)
from .clock import ClockContext
from .credentials import Credentials, Scope
from .exceptions import ConfigurationError
from .signer import RequestSigner
from .transport import Transport

logger = logging.getLogger(__name__)


class FreemiusClient:
    """
    Client for making authenticated requests to the Freemius API.

    Example:
        with FreemiusClient('developer', 1234, 'pk_...', 'sk_...') as client:
            plugins = client.get('/plugins.json')
    """

    def __init__(
        self,
        scope: Union[Scope, str],
        scope_id: int,
        public_key: str,
        secret_key: str,
        sandbox: bool = False,
        clock: Optional[ClockContext] = None,
        **config
    ):
        """
        Initialize the client.

        Args:
            scope: Scope the keys belong to (developer, plugin, install, user, app, store)
            scope_id: ID of the scope entity
            public_key: Public key
            secret_key: Secret key; equal to public_key for public-hash auth
            sandbox: Use the sandbox API
            clock: Clock offset context, defaults to the process-wide one
            **config: Configuration options (timeout, max_attempts, retry_delay,
                user_agent, base_url)
        """
        self.credentials = Credentials(scope, scope_id, public_key, secret_key)
        self.sandbox = sandbox

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self.base_url = (self.config['base_url'] or
                         (SANDBOX_API_ADDRESS if sandbox else API_ADDRESS)).rstrip('/')

        self.signer = RequestSigner(self.credentials, self.base_url, clock=clock)
        self.transport = Transport(
            self.base_url,
            timeout=self.config['timeout'],
            max_attempts=self.config['max_attempts'],
            retry_delay=self.config['retry_delay'],
            user_agent=self.config['user_agent'],
        )

    def _validate_config(self):
        """Validate client configuration."""
        unknown = set(self.config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"Unknown configuration options: {', '.join(sorted(unknown))}")

        if self.config['timeout'] is None or self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['max_attempts'] < 1:
            raise ConfigurationError("max_attempts must be at least 1")

        if self.config['retry_delay'] < 0:
            raise ConfigurationError("retry_delay cannot be negative")

    @property
    def scope(self) -> Scope:
        return self.credentials.scope

    def canonize_path(self, path: str) -> str:
        """
        Resolve a path relative to the credential's scope.

        ``plugins`` and ``/plugins.json`` both become
        ``/developers/<id>/plugins.json`` for a developer scope; a query string
        is carried over unchanged.
        """
        path, sep, query = path.strip('/').partition('?')

        suffix = '.' + FORMAT
        if path.lower().endswith(suffix):
            path = path[:-len(suffix)]

        base = f"/{self.scope.collection}/{self.credentials.scope_id}"
        canonized = base + ('/' + path if path else '')
        if '.' not in path:
            canonized += suffix
        return canonized + sep + query

    def api(self, path: str, method: str = 'GET', params: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Make a scoped API request.

        Args:
            path: Path relative to the scope, e.g. ``/plugins/123.json``
            method: HTTP method
            params: Query parameters for GET/DELETE, JSON body for POST/PUT

        Returns:
            Decoded JSON data, or raw bytes for non-JSON responses

        Raises:
            ApiError: If the API rejected the request
            RateLimitExhaustedError: If the request stayed rate limited
            TransportFailure: If no usable response was received
        """
        return self._request(method, self.canonize_path(path), params)

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make scoped GET request."""
        return self.api(path, 'GET', params)

    def post(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make scoped POST request."""
        return self.api(path, 'POST', params)

    def put(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make scoped PUT request."""
        return self.api(path, 'PUT', params)

    def delete(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make scoped DELETE request."""
        return self.api(path, 'DELETE', params)

    def _request(self, method: str, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        method = method.upper()
        body = None

        if params:
            if method in ('GET', 'DELETE'):
                path += ('&' if '?' in path else '?') + urlencode(params)
            else:
                body = dict(params)

        signed = self.signer.sign(method, path, body)
        logger.debug("%s %s (scope %s)", method, path, self.scope.value)

        response = self.transport.request(
            method,
            f"/{API_VERSION}{path}",
            body=body,
            headers=signed.as_dict(),
        )
        return response.data

    def test(self) -> bool:
        """Check API connectivity; True when the ping endpoint answers ``pong``."""
        pong = self._request('GET', PING_PATH)
        return isinstance(pong, dict) and pong.get('api') == 'pong'

    def find_clock_diff(self) -> int:
        """Seconds the local clock is ahead of the API server."""
        return self.signer.find_clock_diff(self.transport)

    def set_clock_diff(self, seconds: int):
        """Set the clock offset applied to all subsequent signatures."""
        self.signer.set_clock_diff(seconds)

    def sync_clock(self) -> int:
        """Measure the clock offset and apply it. Returns the offset."""
        diff = self.find_clock_diff()
        self.set_clock_diff(diff)
        logger.debug("Clock offset set to %ds", diff)
        return diff

    def get_signed_url(self, path: str, query_params: Optional[Mapping[str, Any]] = None) -> str:
        """Pre-authenticated GET URL for a scoped path."""
        return self.signer.get_signed_url(self.canonize_path(path), query_params)

    def close(self):
        """Close HTTP session."""
        self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
