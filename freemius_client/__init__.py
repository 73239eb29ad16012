"""
Freemius API Client Library

A Python client library that signs and sends requests to the Freemius
REST API.

Example usage:
    from freemius_client import FreemiusClient

    client = FreemiusClient("developer", 1234, "pk_...", "sk_...")
    plugins = client.get("/plugins.json")
"""

from .body import JsonBody, RawBody, to_body
from .client import FreemiusClient
from .clock import ClockContext, default_clock
from .credentials import Credentials, Scope
from .exceptions import (
    FreemiusClientError,
    ConfigurationError,
    ErrorKind,
    TransportError,
    ApiError,
    RateLimitExhaustedError,
    TransportFailure,
    MalformedResponseError
)
from .signer import RequestSigner, SignedHeaders
from .transport import Transport, TransportResponse
from .constants import (
    API_ADDRESS,
    SANDBOX_API_ADDRESS,
    API_VERSION,
    DEFAULT_CONFIG,
    VERSION
)

__version__ = VERSION
__all__ = [
    "FreemiusClient",
    "Credentials",
    "Scope",
    "ClockContext",
    "default_clock",
    "RequestSigner",
    "SignedHeaders",
    "Transport",
    "TransportResponse",
    "JsonBody",
    "RawBody",
    "to_body",
    "FreemiusClientError",
    "ConfigurationError",
    "ErrorKind",
    "TransportError",
    "ApiError",
    "RateLimitExhaustedError",
    "TransportFailure",
    "MalformedResponseError",
    "API_ADDRESS",
    "SANDBOX_API_ADDRESS",
    "API_VERSION",
    "DEFAULT_CONFIG",
]
