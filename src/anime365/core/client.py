"""Anime365Client: one session, both surfaces."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from types import TracebackType
from typing import Callable, TypeVar

from ..api.client import ApiClient
from ..http.csrf import CsrfProvisioner
from ..http.session import HttpSession
from ..logging_config import setup_logging
from ..models.config import ClientConfig
from ..web.client import WebClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Anime365Client:
    """
    Primary entry point: a single HttpSession shared by the API and page clients.

    Cookies obtained through either surface (for example by logging in
    through the pages) are visible to the other, because both go through
    the same session and cookie store.

    Example:
        config = ClientConfig(auth={"username": "me@example.com", "password": "$ANIME365_PASSWORD"})

        async with Anime365Client(config) as client:
            series = await client.api.get_series(42)
            soup = await client.web.get_page("/users/profile", {"dynpage": "1"})
    """

    def __init__(self, config: ClientConfig | None = None):
        """
        Initialize the client.

        Args:
            config: Client configuration. Defaults target the public site
                    without credentials.
        """
        self.config = config or ClientConfig()

        # Components (initialized in __aenter__)
        self._session: HttpSession | None = None
        self._api: ApiClient | None = None
        self._web: WebClient | None = None

    @property
    def session(self) -> HttpSession:
        return self._require(self._session)

    @property
    def api(self) -> ApiClient:
        return self._require(self._api)

    @property
    def web(self) -> WebClient:
        return self._require(self._web)

    @staticmethod
    def _require(component: T | None) -> T:
        if component is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return component

    async def __aenter__(self) -> Anime365Client:
        """Enter async context, open the session and log in if configured."""
        self._session = HttpSession.from_config(self.config.network)
        await self._session.__aenter__()

        csrf = CsrfProvisioner(
            self._session,
            cookie_name=self.config.csrf.cookie_name,
            field_name=self.config.csrf.field_name,
        )
        self._api = ApiClient(self._session)
        self._web = WebClient(self._session, csrf=csrf)

        username, password = self.config.auth.username, self.config.auth.password
        if username and password:
            try:
                await self._web.login(username, password)
            except BaseException:
                await self._session.close()
                raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the session."""
        if self._session:
            await self._session.close()
        self._session = None
        self._api = None
        self._web = None


def run_blocking(
    operation: Callable[[Anime365Client], Awaitable[T]],
    config: ClientConfig | None = None,
) -> T:
    """
    Run one operation against a fresh client from synchronous code.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use Anime365Client directly instead.

    Args:
        operation: Coroutine function receiving the opened client
        config: Client configuration; its log settings are applied

    Returns:
        Whatever ``operation`` returns

    Example:
        series = run_blocking(lambda client: client.api.get_series(42))
    """
    # Detect if we're already in an async context
    try:
        asyncio.get_running_loop()
        raise RuntimeError("run_blocking() called from async context. Use 'async with Anime365Client()' instead.")
    except RuntimeError as e:
        if "no running event loop" not in str(e).lower():
            raise

    config = config or ClientConfig()
    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
    )

    async def _run() -> T:
        async with Anime365Client(config) as client:
            return await operation(client)

    return asyncio.run(_run())
