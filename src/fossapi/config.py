"""
Runtime configuration.

Settings come from the environment:

    FOSSA_API_KEY   API token (required)
    FOSSA_API_URL   API base URL (default https://app.fossa.com/api)
    FOSSA_TIMEOUT   Request timeout in seconds (default 300)
"""

from __future__ import annotations

import os
from collections.abc import Mapping

import pydantic
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from fossapi.domain.exceptions import ConfigError

DEFAULT_API_URL = "https://app.fossa.com/api"
DEFAULT_TIMEOUT = 300.0

ENV_API_KEY = "FOSSA_API_KEY"
ENV_API_URL = "FOSSA_API_URL"
ENV_TIMEOUT = "FOSSA_TIMEOUT"


class FossaConfig(BaseModel):
    """Connection settings for the FOSSA API."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr = Field(..., description="Bearer token")
    api_url: str = Field(default=DEFAULT_API_URL, description="API base URL")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds")

    @field_validator("api_key")
    @classmethod
    def _key_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("API key is empty")
        return value

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FossaConfig:
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            The configuration.

        Raises:
            ConfigError: If a variable is missing or invalid.
        """
        env = os.environ if environ is None else environ

        api_key = env.get(ENV_API_KEY)
        if not api_key:
            raise ConfigError(f"{ENV_API_KEY} environment variable is not set", config_key=ENV_API_KEY)

        values: dict[str, object] = {"api_key": api_key}
        if env.get(ENV_API_URL):
            values["api_url"] = env[ENV_API_URL]
        if env.get(ENV_TIMEOUT):
            values["timeout"] = env[ENV_TIMEOUT]

        try:
            return cls.model_validate(values)
        except pydantic.ValidationError as e:
            field = str(e.errors()[0]["loc"][0]) if e.errors() else None
            key = {"api_key": ENV_API_KEY, "api_url": ENV_API_URL, "timeout": ENV_TIMEOUT}.get(
                field or "", field
            )
            raise ConfigError(f"Invalid value for {key}: {e.errors()[0]['msg']}", config_key=key) from e
