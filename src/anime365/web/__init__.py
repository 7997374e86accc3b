"""Server-rendered page client."""

from .client import WebClient
from .errors import WebClientError
from .helpers import (
    CatalogIdentifiers,
    extract_identifiers_from_url,
    parse_duration_string,
    parse_web_date,
)

__all__ = [
    "WebClient",
    "WebClientError",
    "CatalogIdentifiers",
    "extract_identifiers_from_url",
    "parse_duration_string",
    "parse_web_date",
]
