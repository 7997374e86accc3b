"""CSRF token bootstrapping for state-changing requests."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .session import HttpSession

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf"
CSRF_FIELD_NAME = "csrf"


class CsrfProvisioner:
    """
    Ensures a CSRF token exists before a POST and echoes it in the form body.

    The site accepts any token as long as the ``csrf`` cookie and the
    ``csrf`` form field carry the same value, so the client generates its
    own on first use and keeps it for the lifetime of the session.

    Example:
        csrf = CsrfProvisioner(session)
        body = encode_form(csrf.inject({"comment": "hi"}))
    """

    def __init__(
        self,
        session: HttpSession,
        cookie_name: str = CSRF_COOKIE_NAME,
        field_name: str = CSRF_FIELD_NAME,
    ) -> None:
        self._session = session
        self.cookie_name = cookie_name
        self.field_name = field_name
        self._token: Optional[str] = None
        self._lock = threading.Lock()

    def ensure_token(self) -> str:
        """
        Return the session's CSRF token, creating and persisting it if absent.

        A failure to persist the cookie is logged and the token is still
        returned; the request goes out but the server may reject follow-ups.
        """
        with self._lock:
            token = self._session.get_cookie(self.cookie_name)
            if token:
                self._token = token
                return token

            if self._token is None:
                self._token = str(uuid.uuid4())
                logger.debug(f"Generated CSRF token for {self._session.base_url}")

            try:
                self._session.set_cookie(self.cookie_name, self._token)
            except ValueError as e:
                logger.warning(f"Could not persist CSRF cookie {self.cookie_name!r}: {e}")
            return self._token

    def inject(self, form: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Copy ``form`` and append the token as the last field."""
        token = self.ensure_token()
        fields = {k: v for k, v in (form or {}).items() if k != self.field_name}
        fields[self.field_name] = token
        return fields
