"""Fixtures shared by the engine and HTTP test modules."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from cimd_server.core.config import LoginSettings

CLIENT_ID = "https://ex.test/md.json"
REDIRECT_URI = "https://ex.test/cb"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def login_settings() -> LoginSettings:
    """The demo credential, pinned regardless of the caller's environment."""
    return LoginSettings(DEMO_USERNAME="demo", DEMO_PASSWORD="demo")


@pytest.fixture
def metadata_payload() -> dict:
    """A minimal trustworthy metadata document for ``CLIENT_ID``."""
    return {"client_id": CLIENT_ID, "redirect_uris": [REDIRECT_URI]}
