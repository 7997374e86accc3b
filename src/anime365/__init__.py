"""
anime365 - Async client for the Anime365 JSON API and site pages.

Usage:
    from anime365 import Anime365Client, ClientConfig

    config = ClientConfig(auth={"username": "me@example.com", "password": "$ANIME365_PASSWORD"})

    async with Anime365Client(config) as client:
        series = await client.api.list_series(query="bleach", limit=5)
        html = await client.web.send_request("/users/profile", {"dynpage": "1"})
"""

__version__ = "1.0.0"

from .api import ApiClient, ApiClientError, ApiError
from .core.client import Anime365Client, run_blocking
from .http import (
    Cookie,
    CookieStore,
    CsrfProvisioner,
    HttpResponse,
    HttpSession,
    InvalidRedirectError,
    RequestFailedError,
    RequestTimeoutError,
    ResponseBodyError,
    SessionError,
    TooManyRedirectsError,
)
from .logging_config import setup_logging
from .models.config import AuthConfig, ClientConfig, CsrfConfig, NetworkConfig
from .web import WebClient, WebClientError

__all__ = [
    "__version__",
    # Core
    "Anime365Client",
    "run_blocking",
    "setup_logging",
    # Session
    "HttpSession",
    "HttpResponse",
    "Cookie",
    "CookieStore",
    "CsrfProvisioner",
    # Clients
    "ApiClient",
    "WebClient",
    # Config
    "ClientConfig",
    "NetworkConfig",
    "CsrfConfig",
    "AuthConfig",
    # Errors
    "SessionError",
    "RequestFailedError",
    "RequestTimeoutError",
    "TooManyRedirectsError",
    "InvalidRedirectError",
    "ResponseBodyError",
    "ApiClientError",
    "ApiError",
    "WebClientError",
]
