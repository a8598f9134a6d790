"""Client-level constants shared across modules."""
from __future__ import annotations


class HTTP_METHOD:
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


HTTP_METHODS = frozenset(
    {
        HTTP_METHOD.GET,
        HTTP_METHOD.POST,
        HTTP_METHOD.PUT,
        HTTP_METHOD.DELETE,
        HTTP_METHOD.PATCH,
        HTTP_METHOD.HEAD,
        HTTP_METHOD.OPTIONS,
    }
)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONCURRENCY = 10
DEFAULT_USER_AGENT = "batchhttp/1.0"
DEFAULT_MAX_REDIRECTS = 5

# Keys understood by the dispatcher itself.
BATCH_OPTION_KEYS = frozenset({"timeout", "headers", "concurrency", "callback", "user_agent"})

# Keys forwarded verbatim to httpx.AsyncClient.request().
TRANSPORT_OPTION_NAMES = frozenset({"follow_redirects", "params", "cookies", "auth", "extensions"})

# Keys a single Request may override.
REQUEST_OPTION_KEYS = frozenset({"timeout", "user_agent"}) | TRANSPORT_OPTION_NAMES
