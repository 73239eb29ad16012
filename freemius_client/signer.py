"""
Request signing for the Freemius API.

Every request carries a ``Date`` header and an ``Authorization`` header of the
form ``FS <scope_id>:<public_key>:<signature>``, where the signature is the
base64url encoding of the lowercase hex HMAC-SHA256 over a canonical
description of the request:

    METHOD\\n
    CONTENT-MD5\\n
    application/json\\n
    DATE\\n
    /v1/<path without query string>

When the secret key equals the public key the ``FSP`` (public-hash) scheme is
used instead of ``FS``.
"""

import base64
import datetime
import email.utils
import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from .body import Body, serialize, to_body
from .clock import ClockContext, default_clock
from .constants import (
    API_ADDRESS,
    API_VERSION,
    AUTH_SCHEME_PUBLIC_HASH,
    AUTH_SCHEME_SECRET,
    CONTENT_TYPE_JSON,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_MD5,
    HEADER_DATE,
    PING_PATH,
    QUERY_AUTH_DATE,
    QUERY_AUTHORIZATION,
    SUPPORTED_METHODS,
)
from .credentials import Credentials
from .exceptions import MalformedResponseError


@dataclass(frozen=True)
class SignedHeaders:
    """Authentication headers for exactly one request."""

    date: str
    authorization: str
    content_md5: str = ''

    def as_dict(self) -> Dict[str, str]:
        headers = {
            HEADER_DATE: self.date,
            HEADER_AUTHORIZATION: self.authorization,
        }
        if self.content_md5:
            headers[HEADER_CONTENT_MD5] = self.content_md5
        return headers


def base64url_encode(data: bytes) -> str:
    """Base64 with ``-`` and ``_`` in place of ``+`` and ``/``, no padding."""
    return base64.urlsafe_b64encode(data).decode('ascii').rstrip('=')


def canonical_resource(path: str) -> str:
    """Versioned request path with the query string removed."""
    resource = path.split('?', 1)[0]
    if not resource.startswith('/'):
        resource = '/' + resource
    return f"/{API_VERSION}{resource}"


def format_http_date(timestamp: int) -> str:
    return email.utils.formatdate(timestamp, usegmt=True)


class RequestSigner:
    """
    Produces authentication headers for API requests.

    Signers built without an explicit ``clock`` share the process-wide
    ``default_clock``, so an offset set through one of them applies to all.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = API_ADDRESS,
        clock: Optional[ClockContext] = None,
    ):
        self.credentials = credentials
        self.base_url = base_url.rstrip('/')
        self.clock = clock if clock is not None else default_clock

    @property
    def scheme(self) -> str:
        if self.credentials.uses_public_hash:
            return AUTH_SCHEME_PUBLIC_HASH
        return AUTH_SCHEME_SECRET

    @property
    def clock_diff(self) -> int:
        return self.clock.get()

    def set_clock_diff(self, seconds: int):
        """Set the clock offset used by every signer sharing this clock."""
        self.clock.set(seconds)

    def string_to_sign(self, method: str, path: str, content_md5: str, date: str) -> str:
        return "\n".join([
            method.upper(),
            content_md5,
            CONTENT_TYPE_JSON,
            date,
            canonical_resource(path),
        ])

    def sign(self, method: str, path: str, body: Any = None) -> SignedHeaders:
        """
        Sign a request.

        Args:
            method: HTTP method, case-insensitive
            path: Request path below the API version; any query string is
                ignored for signing
            body: None, a JSON-serializable value, str/bytes, or a ``Body``

        Returns:
            SignedHeaders for this request only
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        date = format_http_date(self.clock.now())
        content_md5 = content_hash(to_body(body))

        message = self.string_to_sign(method, path, content_md5, date)
        mac = hmac.new(
            self.credentials.secret_key.encode('utf-8'),
            message.encode('utf-8'),
            hashlib.sha256
        )

        authorization = "{} {}:{}:{}".format(
            self.scheme,
            self.credentials.scope_id,
            self.credentials.public_key,
            base64url_encode(mac.hexdigest().encode('ascii')),
        )
        return SignedHeaders(date=date, authorization=authorization, content_md5=content_md5)

    def find_clock_diff(self, transport) -> int:
        """
        Measure how far the local clock is ahead of the API server.

        Pings the API through ``transport`` and returns local time minus the
        server's ``timestamp``. The stored offset is left untouched; pass the
        result to ``set_clock_diff`` to apply it.
        """
        local_time = int(time.time())
        headers = self.sign('GET', PING_PATH).as_dict()
        response = transport.get(f"/{API_VERSION}{PING_PATH}", headers=headers)

        remote_time = parse_server_timestamp(response.data)
        return local_time - remote_time

    def get_signed_url(self, path: str, query_params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Build a pre-authenticated GET URL, e.g. for browser downloads.

        The path's own query string is kept and ``query_params``,
        ``auth_date`` and ``authorization`` are appended after it.
        """
        resource, _, query = path.partition('?')
        signed = self.sign('GET', resource)

        params = [(key, _query_value(value)) for key, value in (query_params or {}).items()]
        params.append((QUERY_AUTH_DATE, signed.date))
        params.append((QUERY_AUTHORIZATION, signed.authorization))

        parts = [query] if query else []
        parts.append(urlencode(params))
        return f"{self.base_url}{canonical_resource(resource)}?{'&'.join(parts)}"


def content_hash(body: Body) -> str:
    """Lowercase hex MD5 of the serialized body, empty when there is none."""
    data = serialize(body)
    if not data:
        return ''
    return hashlib.md5(data).hexdigest()


def parse_server_timestamp(payload: Any) -> int:
    """Extract the ``timestamp`` field of a ping reply as UNIX seconds."""
    value = payload.get('timestamp') if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value:
        raise MalformedResponseError("Ping response has no timestamp")

    try:
        parsed = datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        try:
            parsed = email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            raise MalformedResponseError(f"Unparseable server timestamp: {value!r}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return int(parsed.timestamp())


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)
