"""Errors raised by the page client."""

from __future__ import annotations


class WebClientError(Exception):
    """Any failure of a WebClient call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def bad_status_code(cls, status_code: int) -> WebClientError:
        return cls(f"Bad status code: {status_code}", status_code)

    @classmethod
    def could_not_convert_response_data_to_string(cls) -> WebClientError:
        return cls("Could not convert response data to string")

    @classmethod
    def authentication_required(cls) -> WebClientError:
        return cls("Authentication required")

    @classmethod
    def invalid_credentials(cls) -> WebClientError:
        return cls("Invalid credentials")

    @classmethod
    def unknown_error(cls, error: BaseException) -> WebClientError:
        """Wrap a transport failure; raise with ``from error`` to keep the cause."""
        return cls(f"Unknown error: {error}")
