"""Date handling for API payloads."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

# The API reports all timestamps in Moscow time
MSK = timezone(timedelta(hours=3), "MSK")

API_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Placeholder the API uses instead of null
EMPTY_DATE = datetime(2000, 1, 1, tzinfo=MSK)

DATE_FIELD_SUFFIX = "DateTime"


def parse_api_date(value: str) -> datetime:
    """
    Parse ``yyyy-MM-dd HH:mm:ss`` in Moscow time.

    Raises:
        ValueError: If the string does not match the format
    """
    try:
        parsed = datetime.strptime(value, API_DATE_FORMAT)
    except ValueError as e:
        raise ValueError(f"Invalid date format: {value}") from e
    return parsed.replace(tzinfo=MSK)


def is_empty_date(value: datetime) -> bool:
    return value == EMPTY_DATE


def transform_dates(obj: Any) -> Any:
    """Recursively replace string values of ``*DateTime`` keys with datetimes."""
    if isinstance(obj, list):
        return [transform_dates(item) for item in obj]
    if isinstance(obj, dict):
        return {
            key: parse_api_date(value)
            if key.endswith(DATE_FIELD_SUFFIX) and isinstance(value, str)
            else transform_dates(value)
            for key, value in obj.items()
        }
    return obj
