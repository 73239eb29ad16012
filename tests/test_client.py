"""
Unit tests for the Freemius API client.
"""

import hashlib
import json
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from freemius_client import (
    ApiError,
    ClockContext,
    ConfigurationError,
    Credentials,
    FreemiusClient,
    RateLimitExhaustedError,
    Scope,
)
from freemius_client.body import JsonBody, RawBody, serialize, to_body


def json_response(status_code, payload):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode('utf-8')
    response.encoding = 'utf-8'
    response.headers['Content-Type'] = 'application/json'
    return response


class TestFreemiusClient:
    """Test Freemius client functionality."""

    @pytest.fixture
    def client(self):
        """Create test client."""
        return FreemiusClient('developer', 17789, 'pk_test', 'sk_test', clock=ClockContext())

    def test_init_default_config(self, client):
        """Test client initialization with default config."""
        assert client.base_url == "https://api.freemius.com"
        assert client.scope is Scope.DEVELOPER
        assert client.config['timeout'] == 60
        assert client.config['max_attempts'] == 3
        assert client.config['retry_delay'] == 1.0
        assert client.transport.timeout == 60
        assert client.transport.max_attempts == 3

    def test_init_sandbox(self):
        """Test sandbox base URL selection."""
        client = FreemiusClient('plugin', 1, 'pk', 'sk', sandbox=True)

        assert client.base_url == "https://sandbox-api.freemius.com"
        assert client.signer.base_url == client.base_url
        assert client.transport.base_url == client.base_url

    def test_init_custom_config(self):
        """Test client initialization with custom config."""
        client = FreemiusClient(
            'user', 3, 'pk', 'sk',
            base_url="http://localhost:8080/",
            timeout=5,
            max_attempts=5,
            retry_delay=0.5,
        )

        assert client.base_url == "http://localhost:8080"
        assert client.transport.timeout == 5
        assert client.transport.max_attempts == 5
        assert client.transport.retry_delay == 0.5

    def test_init_invalid_config(self):
        """Test client initialization with invalid config."""
        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, 'pk', 'sk', timeout=0)

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, 'pk', 'sk', max_attempts=0)

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, 'pk', 'sk', retry_delay=-1)

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, 'pk', 'sk', retries=2)

    def test_init_invalid_credentials(self):
        """Test that bad credentials fail at construction."""
        with pytest.raises(ConfigurationError):
            FreemiusClient('galaxy', 1, 'pk', 'sk')

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 0, 'pk', 'sk')

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, '', 'sk')

        with pytest.raises(ConfigurationError):
            FreemiusClient('developer', 1, 'pk', '')

    @pytest.mark.parametrize('path, expected', [
        ('plugins', '/developers/17789/plugins.json'),
        ('plugins.json', '/developers/17789/plugins.json'),
        ('/plugins/123?test=1', '/developers/17789/plugins/123.json?test=1'),
        ('/plugins/123/tags/latest.zip', '/developers/17789/plugins/123/tags/latest.zip'),
        ('', '/developers/17789.json'),
        ('/', '/developers/17789.json'),
    ])
    def test_canonize_path(self, client, path, expected):
        """Test canonizing API request paths."""
        assert client.canonize_path(path) == expected

    @pytest.mark.parametrize('scope, base', [
        ('plugin', '/plugins/5'),
        ('install', '/installs/5'),
        ('user', '/users/5'),
        ('app', '/apps/5'),
        ('STORE', '/stores/5'),
    ])
    def test_canonize_path_scopes(self, scope, base):
        """Test path prefix for every scope."""
        client = FreemiusClient(scope, 5, 'pk', 'sk')

        assert client.canonize_path('licenses') == base + '/licenses.json'

    @patch('freemius_client.transport.requests.Session.request')
    def test_get_request(self, mock_request, client):
        """Test that GET requests are signed and versioned."""
        mock_request.return_value = json_response(200, {"plugins": []})

        result = client.get('/plugins.json', params={'count': 10})

        assert result == {"plugins": []}
        args, kwargs = mock_request.call_args
        assert args == ('GET', 'https://api.freemius.com/v1/developers/17789/plugins.json?count=10')
        assert kwargs['headers']['Authorization'].startswith('FS 17789:pk_test:')
        assert 'Date' in kwargs['headers']
        assert 'Content-MD5' not in kwargs['headers']
        assert kwargs['data'] is None

    @patch('freemius_client.transport.requests.Session.request')
    def test_post_request(self, mock_request, client):
        """Test that POST params become a hashed JSON body."""
        mock_request.return_value = json_response(201, {"id": 9})

        client.post('/plugins/1/coupons.json', {"code": "SAVE10", "discount": 10})

        args, kwargs = mock_request.call_args
        expected_body = json.dumps({"code": "SAVE10", "discount": 10}, separators=(',', ':')).encode()
        assert args == ('POST', 'https://api.freemius.com/v1/developers/17789/plugins/1/coupons.json')
        assert kwargs['data'] == expected_body
        assert kwargs['headers']['Content-MD5'] == hashlib.md5(expected_body).hexdigest()
        assert kwargs['headers']['Content-Type'] == 'application/json'

    @patch('freemius_client.transport.requests.Session.request')
    def test_http_methods(self, mock_request, client):
        """Test all HTTP method shortcuts."""
        mock_request.return_value = json_response(200, {})

        client.get('/plugins.json')
        client.post('/plugins.json', {"title": "x"})
        client.put('/plugins/1.json', {"title": "y"})
        client.delete('/plugins/1.json')

        assert mock_request.call_count == 4
        calls = mock_request.call_args_list
        assert [call[0][0] for call in calls] == ['GET', 'POST', 'PUT', 'DELETE']

    @patch('freemius_client.transport.requests.Session.request')
    def test_api_error_propagates(self, mock_request, client):
        """Test that API errors reach the caller."""
        mock_request.return_value = json_response(404, {"error": {"message": "Not Found", "code": 404}})

        with pytest.raises(ApiError) as exc_info:
            client.get('/plugins/999.json')

        assert exc_info.value.status_code == 404

    @patch('freemius_client.transport.time.sleep')
    @patch('freemius_client.transport.requests.Session.request')
    def test_rate_limit_propagates(self, mock_request, mock_sleep, client):
        """Test that exhausted rate limiting reaches the caller."""
        response = requests.Response()
        response.status_code = 429
        response._content = b''
        mock_request.return_value = response

        with pytest.raises(RateLimitExhaustedError):
            client.get('/plugins.json')

        assert mock_request.call_count == 3

    @patch('freemius_client.transport.requests.Session.request')
    def test_connectivity(self, mock_request, client):
        """Test API connectivity using the ping endpoint."""
        mock_request.return_value = json_response(200, {"api": "pong", "timestamp": "2023-12-19T12:00:00Z"})

        assert client.test() is True
        args, _ = mock_request.call_args
        assert args == ('GET', 'https://api.freemius.com/v1/ping.json')

    @patch('freemius_client.transport.requests.Session.request')
    def test_connectivity_unexpected_reply(self, mock_request, client):
        """Test ping with an unexpected reply."""
        mock_request.return_value = json_response(200, {"api": "ping"})

        assert client.test() is False

    @patch('freemius_client.transport.requests.Session.request')
    def test_sync_clock(self, mock_request, client):
        """Test that sync_clock measures and stores the offset."""
        mock_request.return_value = json_response(200, {"api": "pong", "timestamp": "2023-12-19T12:00:00Z"})

        with patch('freemius_client.signer.time.time', return_value=1702987260.0):
            diff = client.sync_clock()

        assert diff == 60
        assert client.signer.clock_diff == 60

    @patch('freemius_client.transport.requests.Session.request')
    def test_find_clock_diff_leaves_offset(self, mock_request, client):
        """Test that find_clock_diff does not store the offset."""
        mock_request.return_value = json_response(200, {"api": "pong", "timestamp": "2023-12-19T12:00:00Z"})

        with patch('freemius_client.signer.time.time', return_value=1702987200.0):
            assert client.find_clock_diff() == 0

        client.set_clock_diff(7)
        assert client.signer.clock_diff == 7

    def test_get_signed_url(self, client):
        """Test generating a signed URL."""
        url = client.get_signed_url('/plugins/123/tags/latest.zip', {'is_premium': True})
        parts = urlsplit(url)
        query = parse_qs(parts.query)

        assert parts.netloc == 'api.freemius.com'
        assert parts.path == '/v1/developers/17789/plugins/123/tags/latest.zip'
        assert query['is_premium'] == ['true']
        assert query['authorization'][0].startswith('FS 17789:pk_test:')
        assert 'auth_date' in query

    def test_context_manager(self):
        """Test client as context manager."""
        with patch('freemius_client.transport.requests.Session.close') as mock_close:
            with FreemiusClient('developer', 1, 'pk', 'sk') as client:
                assert client.transport.session is not None

        mock_close.assert_called_once()


class TestCredentials:
    """Test credential validation."""

    def test_scope_parsing(self):
        assert Credentials('Developer', 1, 'pk', 'sk').scope is Scope.DEVELOPER
        assert Credentials(Scope.STORE, 1, 'pk', 'sk').scope is Scope.STORE

    def test_scope_collection(self):
        assert Scope.INSTALL.collection == 'installs'

    def test_public_hash(self):
        assert Credentials('user', 1, 'k1', 'k1').uses_public_hash is True
        assert Credentials('user', 1, 'pk', 'sk').uses_public_hash is False

    def test_secret_not_in_repr(self):
        assert 'very-secret' not in repr(Credentials('user', 1, 'pk', 'very-secret'))

    def test_invalid_scope_id(self):
        with pytest.raises(ConfigurationError):
            Credentials('user', '12', 'pk', 'sk')

        with pytest.raises(ConfigurationError):
            Credentials('user', True, 'pk', 'sk')

        with pytest.raises(ConfigurationError):
            Credentials('user', -3, 'pk', 'sk')

    def test_immutable(self):
        credentials = Credentials('user', 1, 'pk', 'sk')

        with pytest.raises(AttributeError):
            credentials.secret_key = 'other'


class TestBody:
    """Test request body coercion and serialization."""

    @pytest.mark.parametrize('value', [None, '', b'', {}, []])
    def test_empty_values(self, value):
        assert to_body(value) is None

    def test_coercion(self):
        assert to_body({"a": 1}) == JsonBody({"a": 1})
        assert to_body([1]) == JsonBody([1])
        assert to_body('text') == RawBody(b'text')
        assert to_body(b'\x00\x01') == RawBody(b'\x00\x01')
        assert to_body(RawBody(b'x')) == RawBody(b'x')

    def test_serialize(self):
        assert serialize(None) == b''
        assert serialize(JsonBody({"a": 1, "b": [1, 2]})) == b'{"a":1,"b":[1,2]}'
        assert serialize(RawBody(b'raw')) == b'raw'

    def test_serialize_unsupported(self):
        with pytest.raises(TypeError):
            serialize("not a body")
