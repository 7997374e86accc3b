"""Cookie-persisting async HTTP session with manual redirect handling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Optional
from urllib.parse import urljoin, urlsplit

import aiohttp

from .cookies import CookieStore
from .errors import InvalidRedirectError, RequestFailedError, RequestTimeoutError, ResponseBodyError
from .protocols import HttpResponse, RedirectChain, RedirectHop
from .request import ACCEPT_ANY, CanonicalRequest

if TYPE_CHECKING:
    from ..models.config import NetworkConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)


class HttpSession:
    """
    Stateful HTTP session shared by the API and page clients.

    Features:
    - Cookie store updated from every hop, including intermediate redirects
    - Manual redirect following with method downgrade and a hop bound
    - One deadline covering the whole redirect chain
    - Typed transport errors with the original cause attached

    aiohttp never follows redirects or manages cookies itself here: its
    automatic redirect handling hides the Set-Cookie headers of intermediate
    responses, which breaks login flows that set cookies progressively.

    Example:
        async with HttpSession("https://smotret-anime.com") as session:
            response = await session.request("/users/login")
            print(response.status_code, session.get_cookie("csrf"))
    """

    DEFAULT_TIMEOUT = 10.0
    MAX_REDIRECTS = 10

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        user_agent: str | None = None,
        proxy: str | None = None,
        cookies: CookieStore | None = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            base_url: Site root that request paths are resolved against
            timeout: Default deadline in seconds for a whole request, redirects included
            max_redirects: Maximum redirects followed per request
            user_agent: Custom User-Agent string
            proxy: Proxy URL passed through to aiohttp
            cookies: Existing cookie store to take ownership of
        """
        if not urlsplit(base_url).hostname:
            raise ValueError(f"Base URL has no host: {base_url!r}")
        self._base_url = base_url
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._proxy = proxy
        self._cookies = cookies if cookies is not None else CookieStore()
        self._default_headers = {
            "Accept": ACCEPT_ANY,
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Cache-Control": "no-cache",
        }
        self._client: aiohttp.ClientSession | None = None

    @classmethod
    def from_config(cls, config: NetworkConfig) -> HttpSession:
        """Create a session from the network section of ClientConfig."""
        return cls(
            config.base_url,
            timeout=config.timeout,
            max_redirects=config.max_redirects,
            user_agent=config.user_agent,
            proxy=config.proxy,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def cookies(self) -> CookieStore:
        return self._cookies

    async def __aenter__(self) -> HttpSession:
        """Enter async context and create the aiohttp session."""
        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=10,
            ttl_dns_cache=300,
        )
        self._client = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=aiohttp.DummyCookieJar(),
            # Deadlines are enforced per request() call, not per hop
            timeout=aiohttp.ClientTimeout(total=None, connect=None, sock_read=None, sock_connect=None),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the aiohttp session."""
        await self.close()

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    def get_cookie(self, name: str) -> Optional[str]:
        """Value of a cookie visible at the site root, if any."""
        cookie = self._cookies.get(name, self._root_url())
        return cookie.value if cookie else None

    def set_cookie(self, name: str, value: str) -> None:
        """
        Store a cookie for the base host and root path.

        Raises:
            ValueError: If the store rejects the name or value
        """
        self._cookies.set(name, value, domain=urlsplit(self._base_url).hostname or "", path="/")

    def cookie_header(self) -> str:
        """Cookie header that would be sent to the site root."""
        return self._cookies.header_for(self._root_url())

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """
        Perform a request, following redirects manually.

        Args:
            path: Path (with query) or absolute URL, resolved against the base URL
            method: HTTP method
            headers: Caller headers; they override defaults and the Cookie header
            body: Request body
            timeout: Deadline in seconds for the whole chain (uses default if None)

        Returns:
            HttpResponse of the first non-redirect hop, or of a redirect
            without Location. Any status code is returned, including 4xx/5xx.

        Raises:
            RequestTimeoutError: The deadline expired
            RequestFailedError: The transport failed
            TooManyRedirectsError: More than max_redirects redirects
            InvalidRedirectError: A redirect Location could not be parsed as a URL
            ResponseBodyError: The body of the final response could not be read
        """
        canonical = CanonicalRequest.build(method, urljoin(self._base_url, path), headers, body)
        return await self.send(canonical, timeout=timeout)

    async def send(self, request: CanonicalRequest, *, timeout: float | None = None) -> HttpResponse:
        """Execute an already canonical request. See ``request``."""
        if self._client is None:
            raise RuntimeError("Session not initialized. Use 'async with' context manager.")

        timeout_val = timeout if timeout is not None else self._timeout
        chain = RedirectChain(max_redirects=self._max_redirects)
        try:
            return await asyncio.wait_for(self._follow_redirects(request, chain), timeout_val)
        except asyncio.TimeoutError as e:
            current = chain.hops[-1].url if chain.hops else request.url
            logger.error(
                f"{request.method} {request.url} timed out after {timeout_val:.2f}s "
                f"({len(chain.hops)} redirects followed, last at {current})"
            )
            raise RequestTimeoutError(request.url, timeout_val) from e

    async def _follow_redirects(self, request: CanonicalRequest, chain: RedirectChain) -> HttpResponse:
        client = self._client
        if client is None:
            raise RuntimeError("Session not initialized. Use 'async with' context manager.")

        while True:
            headers = self._merge_headers(request.url, request.headers)
            try:
                async with client.request(
                    request.method,
                    request.url,
                    headers=headers,
                    data=request.body,
                    allow_redirects=False,
                    proxy=self._proxy,
                ) as response:
                    # Cookies from this hop must be visible to the next one,
                    # even if the next one fails.
                    self._cookies.store(response.headers.getall("Set-Cookie", ()), request.url)
                    logger.debug(f"{request.method} {request.url} -> {response.status}")

                    location = response.headers.get("Location")
                    if 300 <= response.status < 400 and location:
                        chain.follow(RedirectHop(request.url, response.status, location))
                        try:
                            request = request.follow(location, response.status)
                        except ValueError as e:
                            logger.error(f"{request.method} {request.url} redirected to invalid location {location!r}")
                            raise InvalidRedirectError(location, chain) from e
                        logger.debug(f"Redirect {response.status} to {request.method} {request.url}")
                        continue

                    content = await response.read()
                    return HttpResponse(
                        status_code=response.status,
                        content=content,
                        content_type=response.headers.get("Content-Type", ""),
                        headers=response.headers,
                        url=request.url,
                        redirects=tuple(chain.hops),
                    )

            except aiohttp.ClientPayloadError as e:
                logger.error(f"Could not read response body from {request.url}: {e}")
                raise ResponseBodyError(f"Could not read response body from {request.url}", request.url) from e
            except (aiohttp.ClientError, OSError) as e:
                logger.error(f"{request.method} {request.url} failed: {e}")
                raise RequestFailedError(f"{request.method} {request.url} failed: {e}", request.url) from e

    def _merge_headers(self, url: str, extra: Mapping[str, str]) -> dict[str, str]:
        merged = dict(self._default_headers)
        cookie_header = self._cookies.header_for(url)
        if cookie_header:
            merged["Cookie"] = cookie_header
        for key, value in extra.items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
        return merged

    def _root_url(self) -> str:
        return urljoin(self._base_url, "/")
