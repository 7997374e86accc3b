"""
Canonical request construction.

The same logical call always serializes to the same bytes: query
parameters are ordered by name, filter maps are flattened with sorted
keys, and form bodies keep the order in which fields were assembled.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional
from urllib.parse import urlencode, urljoin

ACCEPT_JSON = "application/json"
ACCEPT_ANY = "*/*"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

FILTER_SEPARATOR = ";"

# Statuses that turn the next hop into a body-less GET
DOWNGRADE_STATUSES = frozenset({302, 303})

_BODY_HEADERS = frozenset({"content-type", "content-length"})


def sorted_query(params: Optional[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """
    Order query parameters by name.

    Names are compared by code point, so the result never depends on the
    current locale. ``None`` values are dropped; other values are passed
    through ``str``.
    """
    if not params:
        return []
    return sorted(((k, str(v)) for k, v in params.items() if v is not None), key=lambda kv: kv[0])


def flatten_filter(values: Mapping[str, Any], separator: str = FILTER_SEPARATOR) -> str:
    """
    Flatten a key/value filter into one query parameter value.

    Example:
        >>> flatten_filter({"z": "x", "m": "y"})
        'm=y;z=x'
    """
    return separator.join(f"{k}={v}" for k, v in sorted_query(values))


def build_path(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append the canonical query string to ``path``."""
    query = urlencode(sorted_query(params))
    if not query:
        return path
    joiner = "&" if "?" in path else "?"
    return f"{path}{joiner}{query}"


def encode_form(fields: Mapping[str, Any]) -> bytes:
    """URL-encode form fields in insertion order."""
    return urlencode([(k, str(v)) for k, v in fields.items()]).encode("ascii")


@dataclass(frozen=True)
class CanonicalRequest:
    """
    A fully resolved request for one hop.

    Instances are never mutated: following a redirect derives the next
    hop's request with ``follow``.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: bytes | str | None = None,
    ) -> CanonicalRequest:
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(method=method.upper(), url=url, headers=dict(headers or {}), body=body)

    def follow(self, location: str, status: int) -> CanonicalRequest:
        """
        Build the request for the next hop of a redirect.

        302 and 303 switch to GET and drop the body along with its
        Content-Type/Content-Length; 301, 307 and 308 keep both.
        """
        target = urljoin(self.url, location)
        if status in DOWNGRADE_STATUSES:
            headers = {k: v for k, v in self.headers.items() if k.lower() not in _BODY_HEADERS}
            return replace(self, method="GET", url=target, headers=headers, body=None)
        return replace(self, url=target)
