"""HTTP session layer shared by the API and page clients."""

from .cookies import Cookie, CookieStore
from .csrf import CsrfProvisioner
from .errors import (
    InvalidRedirectError,
    RequestFailedError,
    RequestTimeoutError,
    ResponseBodyError,
    SessionError,
    TooManyRedirectsError,
)
from .protocols import HttpResponse, RedirectChain, RedirectHop
from .request import (
    ACCEPT_ANY,
    ACCEPT_JSON,
    FORM_CONTENT_TYPE,
    CanonicalRequest,
    build_path,
    encode_form,
    flatten_filter,
    sorted_query,
)
from .session import HttpSession

__all__ = [
    # Session
    "HttpSession",
    "CsrfProvisioner",
    # Cookies
    "Cookie",
    "CookieStore",
    # Requests
    "ACCEPT_ANY",
    "ACCEPT_JSON",
    "FORM_CONTENT_TYPE",
    "CanonicalRequest",
    "build_path",
    "encode_form",
    "flatten_filter",
    "sorted_query",
    # Responses
    "HttpResponse",
    "RedirectChain",
    "RedirectHop",
    # Errors
    "InvalidRedirectError",
    "RequestFailedError",
    "RequestTimeoutError",
    "ResponseBodyError",
    "SessionError",
    "TooManyRedirectsError",
]
