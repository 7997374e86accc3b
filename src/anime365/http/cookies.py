"""In-memory cookie store scoped to a single HttpSession."""

from __future__ import annotations

import ipaddress
import logging
import re
import threading
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from http.cookiejar import http2time
from typing import Callable, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_FORBIDDEN_VALUE_CHARS = frozenset(";, \t\r\n")
_FORBIDDEN_NAME_CHARS = _FORBIDDEN_VALUE_CHARS | {"="}
_MAX_AGE = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class Cookie:
    """
    A single cookie as held by the store.

    Identity is ``(name, domain, path)``. A host-only cookie was set without
    a ``Domain`` attribute and is only sent back to that exact host.

    Attributes:
        name: Cookie name
        value: Raw cookie value as sent by the server
        domain: Lowercased domain without a leading dot
        path: Cookie path, always starting with ``/``
        secure: Only send over https
        expires: POSIX timestamp, or None for a session cookie
        host_only: True when the server omitted the Domain attribute
    """

    name: str
    value: str
    domain: str
    path: str = "/"
    secure: bool = False
    expires: Optional[float] = None
    host_only: bool = False

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.name, self.domain, self.path)

    def is_expired(self, now: float) -> bool:
        return self.expires is not None and self.expires <= now

    def matches(self, host: str, path: str, scheme: str) -> bool:
        """Check whether this cookie should be sent with a request."""
        if self.secure and scheme != "https":
            return False
        if self.host_only:
            if host != self.domain:
                return False
        elif not domain_match(host, self.domain):
            return False
        return path_match(path, self.path)


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def domain_match(host: str, domain: str) -> bool:
    """RFC 6265 domain matching: exact, or a dot-separated suffix of a hostname."""
    if host == domain:
        return True
    return host.endswith("." + domain) and not _is_ip_address(host)


def path_match(request_path: str, cookie_path: str) -> bool:
    """RFC 6265 path matching."""
    if request_path == cookie_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"


def default_path(request_path: str) -> str:
    """Directory of the request path, used when Set-Cookie has no Path."""
    if not request_path.startswith("/") or request_path.count("/") == 1:
        return "/"
    return request_path[: request_path.rfind("/")]


def _split_url(url: str) -> tuple[str, str, str]:
    parts = urlsplit(url)
    return (parts.hostname or "", parts.path or "/", parts.scheme.lower())


class CookieStore:
    """
    Cookie jar keyed by ``(domain, path)`` and queried by URL.

    The store never touches the network or disk. Every read and write takes
    the same lock, so a batch of Set-Cookie headers from one response is
    applied atomically relative to concurrent lookups.

    Example:
        store = CookieStore()
        store.store(["sid=abc; Path=/"], "https://example.com/login")
        store.header_for("https://example.com/profile")  # "sid=abc"
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._cookies: dict[tuple[str, str], dict[str, Cookie]] = {}

    def __len__(self) -> int:
        with self._lock:
            self._prune_expired()
            return sum(len(bucket) for bucket in self._cookies.values())

    def __iter__(self) -> Iterator[Cookie]:
        with self._lock:
            self._prune_expired()
            snapshot = [c for bucket in self._cookies.values() for c in bucket.values()]
        return iter(sorted(snapshot, key=_sort_key))

    def clear(self) -> None:
        with self._lock:
            self._cookies.clear()

    def cookies_for(self, url: str) -> list[Cookie]:
        """
        Return the cookies to send with a request to ``url``.

        Ordering is by name, then longest path, then domain, so the same
        store contents always render the same Cookie header.
        """
        host, path, scheme = _split_url(url)
        with self._lock:
            self._prune_expired()
            found = [
                cookie
                for bucket in self._cookies.values()
                for cookie in bucket.values()
                if cookie.matches(host, path, scheme)
            ]
        return sorted(found, key=_sort_key)

    def header_for(self, url: str) -> str:
        """Render the Cookie header value for ``url`` (empty if none apply)."""
        return "; ".join(f"{c.name}={c.value}" for c in self.cookies_for(url))

    def get(self, name: str, url: Optional[str] = None) -> Optional[Cookie]:
        """Look up a cookie by name, optionally limited to those visible for ``url``."""
        candidates = self.cookies_for(url) if url is not None else list(self)
        for cookie in candidates:
            if cookie.name == name:
                return cookie
        return None

    def set(
        self,
        name: str,
        value: str,
        domain: str,
        path: str = "/",
        secure: bool = False,
        expires: Optional[float] = None,
    ) -> Cookie:
        """
        Programmatically upsert a domain cookie.

        Raises:
            ValueError: If the name or value cannot be carried in a Cookie header
        """
        if not name or _FORBIDDEN_NAME_CHARS.intersection(name):
            raise ValueError(f"Invalid cookie name: {name!r}")
        if _FORBIDDEN_VALUE_CHARS.intersection(value):
            raise ValueError(f"Invalid value for cookie {name!r}")
        if not domain:
            raise ValueError("Cookie domain must not be empty")

        cookie = Cookie(
            name=name,
            value=value,
            domain=domain.lower().lstrip("."),
            path=path if path.startswith("/") else "/",
            secure=secure,
            expires=expires,
        )
        with self._lock:
            self._upsert(cookie)
        return cookie

    def store(self, set_cookie_headers: Iterable[str], url: str) -> list[Cookie]:
        """
        Parse Set-Cookie header values received from ``url`` and upsert them.

        Malformed headers are logged and skipped. Cookies arriving already
        expired remove any stored cookie with the same identity.

        Returns:
            The cookies that were parsed and accepted, including expirations
        """
        host, request_path, _ = _split_url(url)
        now = self._clock()
        parsed: list[Cookie] = []
        for header in set_cookie_headers:
            cookie = parse_set_cookie(header, host, request_path, now)
            if cookie is not None:
                parsed.append(cookie)

        with self._lock:
            for cookie in parsed:
                if cookie.is_expired(now):
                    self._remove(cookie)
                else:
                    self._upsert(cookie)
        return parsed

    def _upsert(self, cookie: Cookie) -> None:
        self._cookies.setdefault((cookie.domain, cookie.path), {})[cookie.name] = cookie

    def _remove(self, cookie: Cookie) -> None:
        bucket = self._cookies.get((cookie.domain, cookie.path))
        if bucket is not None:
            bucket.pop(cookie.name, None)
            if not bucket:
                del self._cookies[(cookie.domain, cookie.path)]

    def _prune_expired(self) -> None:
        now = self._clock()
        for key in list(self._cookies):
            bucket = self._cookies[key]
            for name in [n for n, c in bucket.items() if c.is_expired(now)]:
                del bucket[name]
            if not bucket:
                del self._cookies[key]


def parse_set_cookie(header: str, host: str, request_path: str, now: float) -> Optional[Cookie]:
    """
    Parse one Set-Cookie header value following RFC 6265 section 5.2.

    The name/value pair runs up to the first ``;`` and splits on its first
    ``=``, so values may themselves contain ``=`` or ``/``. Attribute names
    are case-insensitive; Domain, Path, Secure, Max-Age and Expires are
    honored and anything else (HttpOnly, SameSite, Priority, Partitioned...)
    is ignored. When an attribute repeats, the last one wins.

    Returns:
        The cookie, or None if the header is malformed or its Domain does
        not cover ``host``
    """
    pair, _, unparsed_attributes = header.partition(";")
    name, sep, value = pair.partition("=")
    name, value = name.strip(), value.strip()
    if not sep or not name:
        logger.warning(f"Ignoring malformed Set-Cookie from {host}: {header!r}")
        return None

    attributes: dict[str, str] = {}
    for attribute in unparsed_attributes.split(";"):
        key, _, attr_value = attribute.partition("=")
        key = key.strip().lower()
        if key:
            attributes[key] = attr_value.strip()

    domain_attr = attributes.get("domain", "").lstrip(".").lower()
    if domain_attr:
        if not domain_match(host, domain_attr):
            logger.debug(f"Rejected cookie {name!r}: domain {domain_attr!r} does not match {host!r}")
            return None
        domain, host_only = domain_attr, False
    else:
        domain, host_only = host, True

    path = attributes.get("path", "")
    if not path.startswith("/"):
        path = default_path(request_path)

    return Cookie(
        name=name,
        value=value,
        domain=domain,
        path=path,
        secure="secure" in attributes,
        expires=_expiry(attributes, now),
        host_only=host_only,
    )


def _expiry(attributes: dict[str, str], now: float) -> Optional[float]:
    # Max-Age wins over Expires
    max_age = attributes.get("max-age")
    if max_age is not None:
        if _MAX_AGE.match(max_age):
            return now + int(max_age)
        logger.debug(f"Ignoring invalid Max-Age {max_age!r}")
    expires = attributes.get("expires")
    if expires:
        timestamp = http2time(expires)
        if timestamp is not None:
            return float(timestamp)
        logger.debug(f"Ignoring invalid Expires {expires!r}")
    return None


def _sort_key(cookie: Cookie) -> tuple[str, int, str]:
    return (cookie.name, -len(cookie.path), cookie.domain)
