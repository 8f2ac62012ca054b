"""HTTP client infrastructure."""

from .client import AiohttpClient, iter_limited, read_limited
from .factories import create_secure_connector, create_ssl_context

__all__ = [
    "AiohttpClient",
    "create_secure_connector",
    "create_ssl_context",
    "iter_limited",
    "read_limited",
]
