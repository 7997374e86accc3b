"""Result types returned by the HTTP session."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from charset_normalizer import from_bytes as detect_encoding

from .errors import ResponseBodyError, TooManyRedirectsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedirectHop:
    """One redirect response observed while resolving a request."""

    url: str
    status: int
    location: str


@dataclass
class RedirectChain:
    """
    Ordered redirect hops followed during a single ``HttpSession.request`` call.

    The chain belongs to one call and is never shared. ``follow`` raises once
    the number of followed redirects exceeds ``max_redirects``.
    """

    max_redirects: int = 10
    hops: list[RedirectHop] = field(default_factory=list)

    def follow(self, hop: RedirectHop) -> None:
        self.hops.append(hop)
        if len(self.hops) > self.max_redirects:
            raise TooManyRedirectsError(self)


@dataclass(frozen=True)
class HttpResponse:
    """
    Immutable terminal response returned by HttpSession.

    Attributes:
        status_code: HTTP status code of the last hop (any value, including 3xx/4xx/5xx)
        content: Raw response body
        content_type: Content-Type header value
        headers: Response headers of the last hop
        url: URL of the last hop
        redirects: Redirect hops followed before the last hop
    """

    status_code: int
    content: bytes
    content_type: str
    headers: Mapping[str, str]
    url: str
    redirects: tuple[RedirectHop, ...] = ()

    @property
    def is_redirect(self) -> bool:
        """True for a 3xx delivered without a usable Location header."""
        return 300 <= self.status_code < 400

    def text(self) -> str:
        """
        Decode content with encoding detection.

        Fallback chain:
        1. Content-Type header charset
        2. charset-normalizer detection
        3. UTF-8 with replacement
        """
        encoding = None
        for part in self.content_type.split(";"):
            part = part.strip()
            if part.lower().startswith("charset="):
                encoding = part.split("=", 1)[1].strip().strip("\"'")
                break

        if encoding:
            try:
                return self.content.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Failed to decode with declared encoding: {encoding}")

        if not self.content:
            return ""

        best_match = detect_encoding(self.content).best()
        if best_match is not None:
            logger.debug(f"Detected encoding: {best_match.encoding}")
            return str(best_match)

        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """
        Parse the body as JSON.

        Raises:
            ResponseBodyError: If the body is not valid JSON
        """
        try:
            return json.loads(self.content)
        except (ValueError, UnicodeDecodeError) as e:
            raise ResponseBodyError(f"Response body from {self.url} is not valid JSON", self.url) from e
