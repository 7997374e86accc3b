"""anime365 configuration models."""

from .config import (
    DEFAULT_BASE_URL,
    AuthConfig,
    ClientConfig,
    CsrfConfig,
    NetworkConfig,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "AuthConfig",
    "ClientConfig",
    "CsrfConfig",
    "NetworkConfig",
]
