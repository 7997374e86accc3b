"""Error taxonomy for the HTTP session layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .protocols import RedirectChain


class SessionError(Exception):
    """Base class for failures raised by HttpSession."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RequestFailedError(SessionError):
    """
    The transport could not produce a response.

    DNS, connect and TLS failures land here. The underlying aiohttp or OS
    error is available as ``__cause__``.
    """


class RequestTimeoutError(RequestFailedError):
    """The deadline covering the whole redirect chain expired."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Request to {url} timed out after {timeout:.2f}s", url)
        self.timeout = timeout


class TooManyRedirectsError(SessionError):
    """The server kept redirecting past the configured bound."""

    def __init__(self, chain: RedirectChain) -> None:
        last = chain.hops[-1].url if chain.hops else None
        super().__init__(
            f"Too many redirects ({len(chain.hops)} > {chain.max_redirects})",
            last,
        )
        self.chain = chain


class ResponseBodyError(SessionError):
    """The response body could not be read or decoded."""


class InvalidRedirectError(SessionError):
    """A redirect carried a Location header that is not a usable URL."""

    def __init__(self, location: str, chain: RedirectChain) -> None:
        last = chain.hops[-1].url if chain.hops else None
        super().__init__(f"Invalid redirect location: {location!r}", last)
        self.location = location
        self.chain = chain
