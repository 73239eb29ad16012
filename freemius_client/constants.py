"""
Constants for the Freemius API client.
Values follow the wire contract of the Freemius REST API.
"""

VERSION = "1.0.0"

# API endpoints
API_ADDRESS = "https://api.freemius.com"
SANDBOX_API_ADDRESS = "https://sandbox-api.freemius.com"
API_VERSION = "v1"
FORMAT = "json"
PING_PATH = "/ping.json"

# HTTP headers
HEADER_DATE = "Date"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_MD5 = "Content-MD5"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"

CONTENT_TYPE_JSON = "application/json"

# Authorization schemes
AUTH_SCHEME_SECRET = "FS"
AUTH_SCHEME_PUBLIC_HASH = "FSP"

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

# Query parameters used by pre-signed URLs
QUERY_AUTH_DATE = "auth_date"
QUERY_AUTHORIZATION = "authorization"

HTTP_TOO_MANY_REQUESTS = 429
HTTP_BAD_REQUEST = 400

# Error envelope fallbacks
DEFAULT_ERROR_MESSAGE = "Unknown error, please check result."
DEFAULT_ERROR_CODE = 0
DEFAULT_ERROR_TYPE = ""

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 60,          # HTTP timeout in seconds
    'max_attempts': 3,      # total attempts for a rate-limited request
    'retry_delay': 1.0,     # fixed pause between attempts, in seconds
    'user_agent': f"fs-python-{VERSION}",
    'base_url': None,       # None selects the live or sandbox address
}
