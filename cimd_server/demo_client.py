"""
Minimal OAuth client used to exercise the authorization server end to end.

Flow:
    1. GET /login    -> redirect to the server's authorization endpoint
    2. GET /callback -> receive ``code``, exchange it at the token endpoint
                        and show the token response

Run with ``python -m cimd_server.demo_client``.
"""

from __future__ import annotations

import html
import json
import logging
import secrets
from http import HTTPStatus
from typing import Optional
from urllib.parse import urlencode

import httpx
import uvicorn
from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cimd_server.core.logging import configure_logging

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = (
    "https://raw.githubusercontent.com/tanish111/cimd-local-oauth-server/"
    "refs/heads/main/client-metadata.json"
)


class ClientAppSettings(BaseSettings):
    """Configuration for the demo client."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    auth_server_base: str = Field(
        "http://localhost:3000", validation_alias="AUTH_SERVER_BASE"
    )
    client_id: str = Field(
        DEFAULT_CLIENT_ID,
        validation_alias="CLIENT_ID",
        description="Client metadata document URL used as the client_id.",
    )
    client_port: int = Field(4000, validation_alias="CLIENT_PORT")
    redirect_uri: Optional[str] = Field(None, validation_alias="REDIRECT_URI")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")

    @property
    def authorization_endpoint(self) -> str:
        return f"{self.auth_server_base.rstrip('/')}/authorize"

    @property
    def token_endpoint(self) -> str:
        return f"{self.auth_server_base.rstrip('/')}/token"

    @property
    def effective_redirect_uri(self) -> str:
        return self.redirect_uri or f"http://localhost:{self.client_port}/callback"


def _render_token_page(token_payload: object) -> str:
    pretty = html.escape(json.dumps(token_payload, indent=2))
    return f"""<!doctype html>
<html>
<head><meta charset="utf-8"><title>CIMD client result</title></head>
<body>
  <h1>Token response</h1>
  <pre>{pretty}</pre>
  <p><a href="/login">Start again</a></p>
</body>
</html>
"""


def create_client_app(
    settings: Optional[ClientAppSettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the demo client; ``transport`` lets tests stub the token call."""
    settings = settings or ClientAppSettings()  # type: ignore[call-arg]
    app = FastAPI(title="CIMD demo client")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        client_id = html.escape(settings.client_id)
        return f"""<!doctype html>
<html>
<head><meta charset="utf-8"><title>CIMD demo client</title></head>
<body>
  <h1>CIMD demo client</h1>
  <p>Client ID: <code>{client_id}</code></p>
  <p><a href="/login">Log in with the authorization server</a></p>
</body>
</html>
"""

    @app.get("/login")
    async def login() -> RedirectResponse:
        """Kick off the authorization code flow."""
        params = {
            "response_type": "code",
            "client_id": settings.client_id,
            "redirect_uri": settings.effective_redirect_uri,
            "scope": "openid profile email",
            "state": secrets.token_urlsafe(16),
        }
        url = f"{settings.authorization_endpoint}?{urlencode(params)}"
        return RedirectResponse(url=url, status_code=HTTPStatus.FOUND)

    @app.get("/callback")
    async def callback(
        code: Optional[str] = Query(default=None),
        state: Optional[str] = Query(default=None),
        error: Optional[str] = Query(default=None),
        error_description: Optional[str] = Query(default=None),
    ):
        """Receive the code and exchange it at the token endpoint."""
        if error:
            return PlainTextResponse(
                f"Authorization error: {error} - {error_description or 'no description'}",
                status_code=HTTPStatus.BAD_REQUEST,
            )
        if not code:
            return PlainTextResponse(
                "Missing authorization code", status_code=HTTPStatus.BAD_REQUEST
            )

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
                response = await client.post(
                    settings.token_endpoint,
                    data={"grant_type": "authorization_code", "code": code},
                )
            token_payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Token request to %s failed: %s", settings.token_endpoint, exc)
            return PlainTextResponse(
                "Token request failed", status_code=HTTPStatus.BAD_GATEWAY
            )

        logger.info("Token endpoint answered %d (state=%s)", response.status_code, state)
        return HTMLResponse(_render_token_page(token_payload))

    return app


def main() -> None:
    settings = ClientAppSettings()  # type: ignore[call-arg]
    configure_logging(settings.log_level)
    logger.info("CIMD demo client listening on port %d", settings.client_port)
    uvicorn.run(create_client_app(settings), host="0.0.0.0", port=settings.client_port)


__all__ = ["ClientAppSettings", "create_client_app", "main"]


if __name__ == "__main__":
    main()

