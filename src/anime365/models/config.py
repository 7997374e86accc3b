"""Pydantic configuration models for anime365."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://smotret-anime.com"


class NetworkConfig(BaseModel):
    """Configuration for the HTTP session."""

    base_url: str = Field(DEFAULT_BASE_URL, description="Site root for API and page requests")
    timeout: float = Field(10.0, gt=0, description="Deadline in seconds per request, redirects included")
    max_redirects: int = Field(10, ge=0, description="Maximum redirects followed per request")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")

    model_config = {"extra": "forbid"}


class CsrfConfig(BaseModel):
    """Names under which the CSRF token travels."""

    cookie_name: str = Field("csrf", min_length=1, description="Cookie holding the token")
    field_name: str = Field("csrf", min_length=1, description="Form field echoing the token")

    model_config = {"extra": "forbid"}


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Returns original value if
    the env var is not set.
    """
    import os
    import re

    if value is None:
        return None

    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class AuthConfig(BaseModel):
    """Site credentials used to log in on client start.

    Supports environment variable expansion using $VAR or ${VAR} syntax,
    e.g. ``password: '${ANIME365_PASSWORD}'``.
    """

    username: Optional[str] = Field(None, description="Account e-mail")
    password: Optional[str] = Field(None, description="Account password")

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in credentials after init."""
        if self.username:
            object.__setattr__(self, "username", _expand_env_var(self.username))
        if self.password:
            object.__setattr__(self, "password", _expand_env_var(self.password))

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


class ClientConfig(BaseModel):
    """
    Root configuration model for anime365.

    Example:
        config = ClientConfig(
            network=NetworkConfig(base_url="https://smotret-anime.org", timeout=5),
            auth=AuthConfig(username="me@example.com", password="$ANIME365_PASSWORD"),
        )

    YAML format:
        network:
          base_url: https://smotret-anime.org
          timeout: 5
        auth:
          username: me@example.com
          password: ${ANIME365_PASSWORD}
    """

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    csrf: CsrfConfig = Field(default_factory=CsrfConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClientConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClientConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
