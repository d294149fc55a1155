"""Token endpoint: exchange an authorization code for an access token."""

from __future__ import annotations

import logging
from typing import Mapping

from cimd_server.schemas import TokenResponse
from cimd_server.services.access_tokens import AccessTokenIssuer
from cimd_server.services.authorization_codes import (
    AuthorizationCodeError,
    AuthorizationCodeStore,
)
from cimd_server.services.errors import OAuthError

logger = logging.getLogger(__name__)

INVALID_GRANT = "invalid_grant"
UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"


class TokenExchangeHandler:
    """Redeem a code once and mint a bearer token for it."""

    def __init__(
        self, *, code_store: AuthorizationCodeStore, token_issuer: AccessTokenIssuer
    ) -> None:
        self._codes = code_store
        self._tokens = token_issuer

    def exchange(self, params: Mapping[str, str]) -> TokenResponse:
        if params.get("grant_type") != "authorization_code":
            raise OAuthError(
                UNSUPPORTED_GRANT_TYPE,
                "Only authorization_code is supported",
            )

        try:
            # A missing code is just a code that was never issued.
            grant = self._codes.redeem(params.get("code") or "")
        except AuthorizationCodeError as exc:
            # Not-found and expired share one wire category; the reason stays internal.
            logger.warning("Authorization code redemption failed: %s", exc.reason.value)
            raise OAuthError(INVALID_GRANT, exc.message, reason=exc.reason) from exc

        token = self._tokens.issue()
        logger.info("Issued access token for client %s", grant.client_id)
        return token


__all__ = ["TokenExchangeHandler"]
