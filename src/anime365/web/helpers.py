"""Small parsers for values found in page URLs and markup."""

from __future__ import annotations

import re
from datetime import datetime
from typing import NamedTuple, Optional
from urllib.parse import urlsplit

from ..api.dates import MSK

_TRAILING_ID = re.compile(r"(\d+)$")
_WEB_DATE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4}) (\d{2}):(\d{2})$")


class CatalogIdentifiers(NamedTuple):
    series_id: Optional[int]
    episode_id: Optional[int]


def extract_identifiers_from_url(url: str) -> CatalogIdentifiers:
    """
    Extract series and episode ids from ``/catalog/{series}-{slug}/{episode}-{slug}``.

    Each segment's trailing digits are the id, e.g. ``bleach-12345``.
    """
    parts = [p for p in urlsplit(url).path.split("/") if p]
    if len(parts) < 2 or parts[0] != "catalog":
        return CatalogIdentifiers(None, None)

    series_match = _TRAILING_ID.search(parts[1])
    series_id = int(series_match.group(1)) if series_match else None

    episode_id = None
    if len(parts) >= 3:
        episode_match = _TRAILING_ID.search(parts[2])
        if episode_match:
            episode_id = int(episode_match.group(1))

    return CatalogIdentifiers(series_id, episode_id)


def parse_duration_string(value: str) -> Optional[int]:
    """Parse ``mm:ss`` or ``hh:mm:ss`` into seconds."""
    try:
        parts = [int(p) for p in value.split(":")]
    except ValueError:
        return None

    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    return None


def parse_web_date(value: str) -> Optional[datetime]:
    """Parse ``dd.MM.yyyy HH:mm`` as shown on pages, in Moscow time."""
    match = _WEB_DATE.match(value)
    if not match:
        return None
    day, month, year, hours, minutes = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hours, minutes, tzinfo=MSK)
    except ValueError:
        return None
