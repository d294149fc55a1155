"""FastAPI dependency returning the application settings."""

from cimd_server.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Settings are cached by ``get_settings``; tests override this dependency."""
    return get_settings()


__all__ = ["get_app_settings"]
