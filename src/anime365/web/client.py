"""Client for the server-rendered pages of the site."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from bs4 import BeautifulSoup

from ..http.csrf import CsrfProvisioner
from ..http.errors import ResponseBodyError, SessionError
from ..http.request import FORM_CONTENT_TYPE, build_path, encode_form
from ..http.session import HttpSession
from .errors import WebClientError

logger = logging.getLogger(__name__)

# Markers that the page shown is the login form rather than the requested one
LOGIN_FORM_MARKER = "Вход по паролю"
INVALID_CREDENTIALS_MARKER = "Неверный E-mail или пароль."


class WebClient:
    """
    Page client sharing an HttpSession with the API client.

    GET calls return HTML text; POST calls are URL-encoded forms carrying
    the session's CSRF token. Interpreting the markup is left to the caller.

    Example:
        async with HttpSession("https://smotret-anime.com") as session:
            web = WebClient(session)
            await web.login("me@example.com", "secret")
            soup = await web.get_page("/users/profile", {"dynpage": "1"})
    """

    def __init__(self, session: HttpSession, csrf: Optional[CsrfProvisioner] = None) -> None:
        self._session = session
        self._csrf = csrf or CsrfProvisioner(session)

    @property
    def base_url(self) -> str:
        return self._session.base_url

    async def send_request(self, path: str, query: Optional[Mapping[str, Any]] = None) -> str:
        """
        GET a page and return its HTML.

        Raises:
            WebClientError: On transport failure or a status code of 400 or above
        """
        return await self._execute("GET", build_path(path, query))

    async def send_post_request(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        POST a form with the CSRF token appended and return the resulting HTML.

        Raises:
            WebClientError: On transport failure or a status code of 400 or above
        """
        fields = self._csrf.inject(form)
        return await self._execute(
            "POST",
            build_path(path, query),
            headers={"Content-Type": FORM_CONTENT_TYPE},
            body=encode_form(fields),
        )

    async def _execute(
        self,
        method: str,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> str:
        try:
            response = await self._session.request(path, method=method, headers=headers, body=body)
        except ResponseBodyError as e:
            logger.debug(f"Could not read response body: {method} {path}")
            raise WebClientError.could_not_convert_response_data_to_string() from e
        except SessionError as e:
            logger.debug(f"Request failed: {method} {path}: {e}")
            raise WebClientError.unknown_error(e) from e

        logger.debug(f"Web request: {method} {path} [{response.status_code}]")

        if response.status_code >= 400:
            raise WebClientError.bad_status_code(response.status_code)

        return response.text()

    def parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    @staticmethod
    def is_login_page(html: str) -> bool:
        return LOGIN_FORM_MARKER in html

    async def get_page(self, path: str, query: Optional[Mapping[str, Any]] = None) -> BeautifulSoup:
        """
        GET a page that requires a logged-in session and parse it.

        Raises:
            WebClientError: If the site answered with the login form instead
        """
        html = await self.send_request(path, query)
        if self.is_login_page(html):
            raise WebClientError.authentication_required()
        return self.parse_html(html)

    async def login(self, username: str, password: str) -> None:
        """
        Log in with e-mail and password.

        The session cookies set along the login redirect chain are kept in
        the session's cookie store.

        Raises:
            WebClientError: If the site rejected the credentials
        """
        html = await self.send_post_request(
            "/users/login",
            form={
                "LoginForm[username]": username,
                "LoginForm[password]": password,
                "dynpage": "1",
                "yt0": "",
            },
        )
        if INVALID_CREDENTIALS_MARKER in html or self.is_login_page(html):
            raise WebClientError.invalid_credentials()
        logger.info(f"Logged in to {self.base_url} as {username}")

    async def edit_anime_list_entry(
        self,
        series_id: int,
        score: int,
        episodes: int,
        status: int,
        comment: str,
    ) -> None:
        await self.send_post_request(
            f"/animelist/edit/{series_id}",
            {"mode": "mini"},
            {
                "UsersRates[score]": score,
                "UsersRates[episodes]": episodes,
                "UsersRates[status]": status,
                "UsersRates[comment]": comment,
            },
        )

    async def mark_episode_as_watched(self, translation_id: int) -> None:
        await self.send_post_request(f"/translations/watched/{translation_id}")
