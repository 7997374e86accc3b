"""Errors raised by the JSON API client."""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """An error envelope returned by the API."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def authentication_required(cls) -> ApiError:
        return cls(403, "Authentication required")

    @classmethod
    def not_found(cls) -> ApiError:
        return cls(404, "Not found")

    @classmethod
    def other(cls, code: int, message: str) -> ApiError:
        return cls(code, message)

    @classmethod
    def from_envelope(cls, code: int, message: str) -> ApiError:
        """Map an error envelope to the well-known errors where possible."""
        if code == 403:
            return cls.authentication_required()
        if code == 404:
            return cls.not_found()
        return cls.other(code, message)


class ApiClientError(Exception):
    """
    Any failure of an ApiClient call.

    The reason is available as ``__cause__``: an ApiError for error
    envelopes, a session error for transport failures, or the decoding error.
    """

    @classmethod
    def request_failed(cls) -> ApiClientError:
        return cls("Request failed")

    @classmethod
    def decode_failed(cls) -> ApiClientError:
        return cls("Cannot decode response JSON")

    @classmethod
    def api_error(cls, error: ApiError) -> ApiClientError:
        return cls(f"API error: {error.message}")

    @property
    def api(self) -> Optional[ApiError]:
        """The API error envelope behind this failure, if any."""
        return self.__cause__ if isinstance(self.__cause__, ApiError) else None
