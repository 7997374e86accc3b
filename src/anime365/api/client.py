"""Client for the JSON API under ``/api``."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..http.errors import ResponseBodyError, SessionError
from ..http.request import ACCEPT_JSON, build_path, flatten_filter
from ..http.session import HttpSession
from .dates import transform_dates
from .envelope import ApiFailure, decode_envelope
from .errors import ApiClientError, ApiError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    JSON API client sharing an HttpSession with the page client.

    Payloads are returned as decoded JSON (dicts and lists) with every
    ``*DateTime`` field converted to an aware datetime.

    Example:
        async with HttpSession("https://smotret-anime.com") as session:
            api = ApiClient(session)
            series = await api.list_series(query="bleach", limit=5)
    """

    API_PREFIX = "/api"

    def __init__(self, session: HttpSession) -> None:
        self._session = session

    async def send_request(self, endpoint: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        """
        GET an API endpoint and unwrap its envelope.

        Args:
            endpoint: Path below ``/api``, e.g. ``/series/42``
            query: Query parameters, sorted by name before sending

        Returns:
            The ``data`` member of a success envelope

        Raises:
            ApiClientError: On transport failure, undecodable JSON or an error envelope
        """
        path = build_path(f"{self.API_PREFIX}{endpoint}", query)
        try:
            response = await self._session.request(path, headers={"Accept": ACCEPT_JSON})
        except ResponseBodyError as e:
            raise ApiClientError.decode_failed() from e
        except SessionError as e:
            logger.error(f"API request failed: GET {path}: {e}")
            raise ApiClientError.request_failed() from e

        logger.debug(f"API request: GET {path} [{response.status_code}]")

        try:
            envelope = decode_envelope(response.json())
        except ResponseBodyError as e:
            raise ApiClientError.decode_failed() from e

        if isinstance(envelope, ApiFailure):
            error = ApiError.from_envelope(envelope.error.code, envelope.error.message)
            raise ApiClientError.api_error(error) from error

        try:
            return transform_dates(envelope.data)
        except ValueError as e:
            raise ApiClientError.decode_failed() from e

    async def get_series(self, series_id: int) -> Any:
        return await self.send_request(f"/series/{series_id}")

    async def get_episode(self, episode_id: int) -> Any:
        return await self.send_request(f"/episodes/{episode_id}")

    async def list_series(
        self,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        chips: Optional[Mapping[str, str]] = None,
        my_anime_list_id: Optional[int] = None,
    ) -> Any:
        """
        Search series.

        Args:
            query: Free-text search
            limit: Page size
            offset: Page offset
            chips: Filter map such as ``{"genre": "1", "year": "2024"}``
            my_anime_list_id: Look up by MyAnimeList id
        """
        params: dict[str, Any] = {
            "query": query,
            "limit": limit,
            "offset": offset,
            "myAnimeListId": my_anime_list_id,
        }
        if chips:
            params["chips"] = flatten_filter(chips)
        return await self.send_request("/series", params)

    async def list_episodes(
        self,
        series_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Any:
        return await self.send_request(
            "/episodes",
            {"seriesId": series_id, "limit": limit, "offset": offset},
        )

    async def get_translation(self, translation_id: int) -> Any:
        return await self.send_request(f"/translations/{translation_id}")

    async def get_translation_embed(self, translation_id: int) -> Any:
        return await self.send_request(f"/translations/embed/{translation_id}")
