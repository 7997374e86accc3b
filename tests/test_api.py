"""Tests for the JSON API client, envelopes and date decoding."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from anime365.api import (
    EMPTY_DATE,
    ApiClient,
    ApiClientError,
    ApiError,
    ApiFailure,
    ApiSuccess,
    decode_envelope,
    is_empty_date,
    parse_api_date,
    transform_dates,
)
from anime365.http import RequestFailedError


class TestEnvelope:
    """Tests for envelope decoding."""

    def test_success(self):
        """Test a data envelope decodes to ApiSuccess."""
        envelope = decode_envelope({"data": [1, 2]})
        assert isinstance(envelope, ApiSuccess)
        assert envelope.data == [1, 2]

    def test_null_data_is_success(self):
        """Test a null payload is still a success envelope."""
        assert isinstance(decode_envelope({"data": None}), ApiSuccess)

    def test_failure(self):
        """Test an error envelope decodes to ApiFailure."""
        envelope = decode_envelope({"error": {"code": 404, "message": "Not found"}})
        assert isinstance(envelope, ApiFailure)
        assert envelope.error.code == 404

    def test_error_wins_over_data(self):
        """Test a payload carrying both keys is treated as an error."""
        envelope = decode_envelope({"data": 1, "error": {"code": 500, "message": "boom"}})
        assert isinstance(envelope, ApiFailure)

    @pytest.mark.parametrize("payload", [{"result": 1}, [1, 2], "text", {"error": "oops"}])
    def test_unknown_shapes_rejected(self, payload):
        """Test payloads matching neither envelope fail to decode."""
        with pytest.raises(ApiClientError, match="Cannot decode"):
            decode_envelope(payload)


class TestDates:
    """Tests for API date handling."""

    def test_parse_moscow_time(self):
        """Test dates are read as UTC+3."""
        parsed = parse_api_date("2024-01-15 14:30:00")
        assert parsed == datetime(2024, 1, 15, 11, 30, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(hours=3)

    def test_invalid_date(self):
        """Test malformed dates raise ValueError."""
        with pytest.raises(ValueError, match="Invalid date format"):
            parse_api_date("15.01.2024")

    def test_empty_date(self):
        """Test the 2000-01-01 MSK placeholder is recognized."""
        assert is_empty_date(parse_api_date("2000-01-01 00:00:00"))
        assert is_empty_date(datetime(1999, 12, 31, 21, tzinfo=timezone.utc))
        assert not is_empty_date(parse_api_date("2000-01-01 00:00:01"))
        assert EMPTY_DATE.year == 2000

    def test_transform_nested(self):
        """Test only *DateTime string fields are converted, at any depth."""
        result = transform_dates(
            {
                "id": 1,
                "updatedDateTime": "2024-01-15 14:30:00",
                "title": "2024-01-15 14:30:00",
                "episodes": [{"firstUploadedDateTime": "2020-05-01 10:00:00"}],
                "nullDateTime": None,
            }
        )
        assert isinstance(result["updatedDateTime"], datetime)
        assert result["title"] == "2024-01-15 14:30:00"
        assert isinstance(result["episodes"][0]["firstUploadedDateTime"], datetime)
        assert result["nullDateTime"] is None


class TestApiClientLive:
    """Tests for ApiClient against the fake site."""

    @pytest.mark.asyncio
    async def test_list_series_query_and_dates(self, session):
        """Test list_series sorts parameters, flattens chips and converts dates."""
        api = ApiClient(session)
        result = await api.list_series(query="bleach", limit=5, chips={"year": "2024", "genre": "1"})

        assert result[0]["query"] == [["chips", "genre=1;year=2024"], ["limit", "5"], ["query", "bleach"]]
        assert result[0]["updatedDateTime"] == parse_api_date("2024-01-15 14:30:00")
        assert is_empty_date(result[0]["episodes"][0]["firstUploadedDateTime"])

    @pytest.mark.asyncio
    async def test_accept_json(self, session):
        """Test API calls negotiate JSON."""
        result = await ApiClient(session).get_series(7)
        assert result == {"id": 7, "accept": "application/json"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("series_id", "code", "message"),
        [(404, 404, "Not found"), (403, 403, "Authentication required"), (500, 500, "Internal failure")],
    )
    async def test_error_envelopes(self, session, series_id, code, message):
        """Test error envelopes raise ApiClientError wrapping ApiError."""
        with pytest.raises(ApiClientError) as exc_info:
            await ApiClient(session).get_series(series_id)

        api_error = exc_info.value.api
        assert isinstance(api_error, ApiError)
        assert api_error.code == code
        assert api_error.message == message
        assert str(exc_info.value) == f"API error: {message}"

    @pytest.mark.asyncio
    async def test_non_json_body(self, session):
        """Test a non-JSON body raises a decode error."""
        with pytest.raises(ApiClientError, match="Cannot decode") as exc_info:
            await ApiClient(session).send_request("/broken")
        assert exc_info.value.api is None
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_unexpected_envelope(self, session):
        """Test JSON that is neither envelope raises a decode error."""
        with pytest.raises(ApiClientError, match="Cannot decode"):
            await ApiClient(session).send_request("/unexpected")


class TestApiClientUnit:
    """Tests for ApiClient request construction with a mocked session."""

    @pytest.fixture
    def mock_session(self):
        session = MagicMock()
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = {"data": []}
        session.request = AsyncMock(return_value=response)
        return session

    @pytest.mark.asyncio
    async def test_list_episodes_path(self, mock_session):
        """Test list_episodes builds a sorted query under /api."""
        await ApiClient(mock_session).list_episodes(series_id=3, limit=10)

        mock_session.request.assert_awaited_once_with(
            "/api/episodes?limit=10&seriesId=3",
            headers={"Accept": "application/json"},
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "arg", "path"),
        [
            ("get_episode", 5, "/api/episodes/5"),
            ("get_translation", 6, "/api/translations/6"),
            ("get_translation_embed", 7, "/api/translations/embed/7"),
        ],
    )
    async def test_item_paths(self, mock_session, method, arg, path):
        """Test single-item endpoints map to their API paths."""
        await getattr(ApiClient(mock_session), method)(arg)
        assert mock_session.request.await_args.args[0] == path

    @pytest.mark.asyncio
    async def test_my_anime_list_id(self, mock_session):
        """Test the MyAnimeList lookup parameter name."""
        await ApiClient(mock_session).list_series(my_anime_list_id=269)
        assert mock_session.request.await_args.args[0] == "/api/series?myAnimeListId=269"

    @pytest.mark.asyncio
    async def test_transport_failure(self, mock_session):
        """Test transport errors become request_failed with the cause chained."""
        cause = RequestFailedError("boom", "https://example.com/api/series")
        mock_session.request.side_effect = cause

        with pytest.raises(ApiClientError, match="Request failed") as exc_info:
            await ApiClient(mock_session).list_series()
        assert exc_info.value.__cause__ is cause
