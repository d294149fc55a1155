"""
Authorization endpoint flow.

An authorize request moves through client validation, redirect validation,
the login step, code issuance and finally a redirect back to the client.
Every step before the login re-runs on each request, including the request
that carries the submitted credentials, so nothing a browser round-trips is
trusted without being checked again.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from cimd_server.clients.metadata import ClientMetadataError, ClientMetadataFetcher
from cimd_server.core.config import LoginSettings
from cimd_server.schemas import AuthorizeRequestParams, ClientMetadataDocument
from cimd_server.services.authorization_codes import AuthorizationCodeStore
from cimd_server.services.client_id import InvalidClientIdError, validate_client_id_url
from cimd_server.services.errors import OAuthError
from cimd_server.services.redirects import RedirectUriError, match_redirect_uri

logger = logging.getLogger(__name__)

INVALID_REQUEST = "invalid_request"
UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"

CREDENTIAL_FIELDS = ("username", "password")


@dataclass(frozen=True)
class CredentialChallenge:
    """The flow is waiting for the resource owner to log in.

    ``params`` are the original request parameters, to be sent back
    unchanged together with the credentials.
    """

    params: Dict[str, str]
    error: Optional[str] = None


@dataclass(frozen=True)
class AuthorizeRedirect:
    """Terminal success: deliver the code to the client's redirect URI."""

    location: str


AuthorizeOutcome = Union[CredentialChallenge, AuthorizeRedirect]


def append_query_params(uri: str, params: Mapping[str, str]) -> str:
    """Set ``params`` on ``uri``'s query string, replacing existing keys."""
    parts = urlsplit(uri)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in params
    ]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


class AuthorizeFlowController:
    """Drive a single authorize request to a challenge, a redirect or an error."""

    def __init__(
        self,
        *,
        fetcher: ClientMetadataFetcher,
        code_store: AuthorizationCodeStore,
        login: LoginSettings,
    ) -> None:
        self._fetcher = fetcher
        self._codes = code_store
        self._login = login

    async def authorize(self, params: Mapping[str, str]) -> AuthorizeOutcome:
        request = AuthorizeRequestParams(
            client_id=params.get("client_id"),
            redirect_uri=params.get("redirect_uri"),
            response_type=params.get("response_type"),
            state=params.get("state"),
        )

        # Cheap checks come first so a bad request never triggers a fetch.
        if not request.client_id:
            raise OAuthError(INVALID_REQUEST, "client_id is required")
        if not request.response_type:
            raise OAuthError(INVALID_REQUEST, "response_type is required")
        if request.response_type != "code":
            raise OAuthError(
                UNSUPPORTED_RESPONSE_TYPE, "only response_type=code is supported"
            )

        client_id = self._validate_client(request.client_id)
        document = await self._fetch_metadata(client_id)
        redirect_uri = self._validate_redirect(request.redirect_uri, document)

        continuation = {
            key: value for key, value in params.items() if key not in CREDENTIAL_FIELDS
        }
        if not any(field in params for field in CREDENTIAL_FIELDS):
            return CredentialChallenge(params=continuation)
        if not self._credentials_match(params):
            logger.info("Rejected login attempt for client %s", client_id)
            return CredentialChallenge(
                params=continuation, error="Invalid username or password"
            )

        code = self._codes.issue(client_id, redirect_uri, request.state)
        redirect_params = {"code": code.code}
        if request.state:
            redirect_params["state"] = request.state
        return AuthorizeRedirect(
            location=append_query_params(redirect_uri, redirect_params)
        )

    def _validate_client(self, raw_client_id: str) -> str:
        try:
            return validate_client_id_url(raw_client_id)
        except InvalidClientIdError as exc:
            logger.warning("Rejected client_id %r: %s", raw_client_id, exc.reason.value)
            raise OAuthError(INVALID_REQUEST, exc.message, reason=exc.reason) from exc

    async def _fetch_metadata(self, client_id: str) -> ClientMetadataDocument:
        try:
            return await self._fetcher.fetch_and_validate(client_id)
        except ClientMetadataError as exc:
            logger.warning(
                "Client metadata rejected for %s: %s", client_id, exc.reason.value
            )
            raise OAuthError(INVALID_REQUEST, exc.message, reason=exc.reason) from exc

    def _validate_redirect(
        self, redirect_uri: Optional[str], document: ClientMetadataDocument
    ) -> str:
        try:
            return match_redirect_uri(redirect_uri, document)
        except RedirectUriError as exc:
            logger.warning(
                "Redirect URI rejected for %s: %s", document.client_id, exc.reason.value
            )
            raise OAuthError(INVALID_REQUEST, exc.message, reason=exc.reason) from exc

    def _credentials_match(self, params: Mapping[str, str]) -> bool:
        username = params.get("username") or ""
        password = params.get("password") or ""
        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self._login.username.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), self._login.password.encode("utf-8")
        )
        return username_ok and password_ok


__all__ = [
    "AuthorizeFlowController",
    "AuthorizeOutcome",
    "AuthorizeRedirect",
    "CredentialChallenge",
    "append_query_params",
]
