"""Runtime configuration for the MegaSearch bridge resolved from the environment."""

from __future__ import annotations

import logging

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from megasearch_mcp.auth.credentials import Credentials
from megasearch_mcp.errors import ConfigError

DEFAULT_BASE_URL = "https://megasearch.prodevs.in"
DEFAULT_TIMEOUT_MS = 300_000


class MegaSearchSettings(BaseSettings):
    """Connection and credential settings for the remote search service."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    base_url: str = Field(default=DEFAULT_BASE_URL, alias="MEGASEARCH_BASE_URL")
    client_id: str = Field(default="", alias="MEGASEARCH_CLIENT_ID")
    client_secret: SecretStr = Field(
        default_factory=lambda: SecretStr(""), alias="MEGASEARCH_CLIENT_SECRET"
    )
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, alias="MEGASEARCH_TIMEOUT", gt=0)

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().rstrip("/") or DEFAULT_BASE_URL
        return value

    @property
    def client_secret_value(self) -> str:
        return self.client_secret.get_secret_value()

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret_value.strip())

    def credentials(self) -> Credentials:
        if not self.has_credentials:
            raise ConfigError()
        return Credentials(client_id=self.client_id.strip(), client_secret=self.client_secret_value.strip())

    @classmethod
    def load(cls) -> MegaSearchSettings:
        instance = cls()
        logger = logging.getLogger("megasearch_mcp.settings")
        logger.info(
            "megasearch settings loaded",
            extra={
                "data": {
                    "base_url": instance.base_url,
                    "client_id": f"{instance.client_id[:10]}...",
                    "client_secret_set": bool(instance.client_secret_value),
                    "timeout_ms": instance.timeout_ms,
                }
            },
        )
        return instance


__all__ = ["MegaSearchSettings", "DEFAULT_BASE_URL", "DEFAULT_TIMEOUT_MS"]
