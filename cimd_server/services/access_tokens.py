"""Stateless issuance of opaque bearer tokens."""

from __future__ import annotations

import secrets

from cimd_server.schemas.oauth import TokenResponse

ACCESS_TOKEN_EXPIRES_IN = 3600
TOKEN_ENTROPY_BYTES = 32


class AccessTokenIssuer:
    """Mint demonstration-grade bearer tokens.

    Tokens are not stored anywhere and carry no link to the code that was
    exchanged for them.
    """

    def issue(self) -> TokenResponse:
        return TokenResponse(
            access_token=secrets.token_urlsafe(TOKEN_ENTROPY_BYTES),
            token_type="Bearer",
            expires_in=ACCESS_TOKEN_EXPIRES_IN,
        )


__all__ = ["ACCESS_TOKEN_EXPIRES_IN", "AccessTokenIssuer"]
