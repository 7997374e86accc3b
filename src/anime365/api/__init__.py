"""JSON API client."""

from .client import ApiClient
from .dates import EMPTY_DATE, MSK, is_empty_date, parse_api_date, transform_dates
from .envelope import ApiFailure, ApiSuccess, decode_envelope
from .errors import ApiClientError, ApiError

__all__ = [
    "ApiClient",
    # Envelopes
    "ApiFailure",
    "ApiSuccess",
    "decode_envelope",
    # Dates
    "EMPTY_DATE",
    "MSK",
    "is_empty_date",
    "parse_api_date",
    "transform_dates",
    # Errors
    "ApiClientError",
    "ApiError",
]
