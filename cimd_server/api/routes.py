"""
FastAPI routes for the CIMD authorization server.
"""

from __future__ import annotations

import html
import logging
from http import HTTPStatus
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from cimd_server.dependencies import (
    get_app_settings,
    get_authorize_controller,
    get_token_exchange_handler,
)
from cimd_server.services import AuthorizeRedirect, CredentialChallenge, OAuthError

router = APIRouter()
logger = logging.getLogger(__name__)

_NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


async def _request_params(request: Request) -> Dict[str, str]:
    """Collapse query string or form body into one single-valued mapping."""
    if request.method == "POST":
        source = await request.form()
    else:
        source = request.query_params
    return {key: value for key, value in source.items() if isinstance(value, str)}


def _render_login_page(challenge: CredentialChallenge) -> str:
    hidden_fields = "\n".join(
        f'    <input type="hidden" name="{html.escape(key)}" value="{html.escape(value)}">'
        for key, value in challenge.params.items()
    )
    client_id = html.escape(challenge.params.get("client_id", ""))
    banner = (
        f'  <p class="error" role="alert">{html.escape(challenge.error)}</p>\n'
        if challenge.error
        else ""
    )
    return f"""<!doctype html>
<html>
<head><meta charset="utf-8"><title>Sign in</title></head>
<body>
  <h1>Sign in</h1>
  <p>Client <code>{client_id}</code> is requesting access.</p>
{banner}  <form method="post" action="/authorize">
{hidden_fields}
    <label>Username <input name="username" autocomplete="username"></label>
    <label>Password <input name="password" type="password" autocomplete="current-password"></label>
    <button type="submit">Sign in</button>
  </form>
</body>
</html>
"""


async def _handle_authorize(request: Request, controller: Any) -> Response:
    params = await _request_params(request)
    try:
        outcome = await controller.authorize(params)
    except OAuthError as exc:
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content=exc.to_dict())

    if isinstance(outcome, AuthorizeRedirect):
        return RedirectResponse(url=outcome.location, status_code=HTTPStatus.FOUND)

    status_code = HTTPStatus.UNAUTHORIZED if outcome.error else HTTPStatus.OK
    return HTMLResponse(
        content=_render_login_page(outcome),
        status_code=status_code,
        headers=_NO_STORE_HEADERS,
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/.well-known/oauth-authorization-server")
async def authorization_server_metadata(
    settings: Annotated[Any, Depends(get_app_settings)],
) -> dict:
    """Minimal authorization server metadata advertising CIMD support."""
    return settings.discovery_document()


@router.get("/authorize")
async def authorize_get(
    request: Request,
    controller: Annotated[Any, Depends(get_authorize_controller)],
) -> Response:
    """Authorization endpoint for query-string requests."""
    return await _handle_authorize(request, controller)


@router.post("/authorize")
async def authorize_post(
    request: Request,
    controller: Annotated[Any, Depends(get_authorize_controller)],
) -> Response:
    """Authorization endpoint for form posts, including the login form."""
    return await _handle_authorize(request, controller)


@router.post("/token")
async def token(
    request: Request,
    handler: Annotated[Any, Depends(get_token_exchange_handler)],
) -> Response:
    """Exchange an authorization code for a bearer token."""
    params = await _request_params(request)
    try:
        token_response = handler.exchange(params)
    except OAuthError as exc:
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content=exc.to_dict(),
            headers=_NO_STORE_HEADERS,
        )
    return JSONResponse(content=token_response.model_dump(), headers=_NO_STORE_HEADERS)


__all__ = ["router"]
