"""
Application configuration models and helpers.

Centralizes settings management so the authorization server, the demo client
and the process entrypoint share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


class LoginSettings(BaseSettings):
    """The fixed demonstration credential accepted on the login step."""

    model_config = _ENV_CONFIG

    username: str = Field("demo", validation_alias="DEMO_USERNAME")
    password: str = Field("demo", validation_alias="DEMO_PASSWORD")


class MetadataFetchSettings(BaseSettings):
    """Settings for retrieving client metadata documents."""

    model_config = _ENV_CONFIG

    timeout_seconds: float = Field(
        10.0,
        validation_alias="METADATA_FETCH_TIMEOUT",
        description="Upper bound for a single metadata document fetch.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _ENV_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(3000, validation_alias="PORT")
    issuer: Optional[str] = Field(
        None,
        validation_alias="ISSUER",
        description="Public base URL; defaults to http://localhost:{port}.",
    )
    cors_allow_origins: str = Field(
        "*",
        validation_alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of origins allowed by CORS.",
    )
    login: LoginSettings = Field(default_factory=LoginSettings)
    metadata: MetadataFetchSettings = Field(default_factory=MetadataFetchSettings)

    @property
    def allowed_origins(self) -> list[str]:
        """Split the configured CORS origins."""
        return [
            origin.strip()
            for origin in self.cors_allow_origins.split(",")
            if origin.strip()
        ]

    @property
    def effective_issuer(self) -> str:
        issuer = self.issuer or f"http://localhost:{self.port}"
        return issuer.rstrip("/")

    def discovery_document(self) -> Dict[str, Any]:
        """Authorization server metadata advertised to clients."""
        issuer = self.effective_issuer
        return {
            "issuer": issuer,
            "authorization_endpoint": f"{issuer}/authorize",
            "token_endpoint": f"{issuer}/token",
            "client_id_metadata_document_supported": True,
        }


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "LoginSettings",
    "MetadataFetchSettings",
    "get_settings",
]
