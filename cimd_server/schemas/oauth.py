"""Schemas exchanged over the authorize and token endpoints."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class AuthorizeRequestParams(BaseModel):
    """The parameters of an authorize request, whatever the transport."""

    client_id: Optional[str] = None
    redirect_uri: Optional[str] = None
    response_type: Optional[str] = None
    state: Optional[str] = None


class TokenResponse(BaseModel):
    """Successful token endpoint response."""

    access_token: str = Field(..., description="Opaque bearer credential.")
    token_type: Literal["Bearer"] = "Bearer"
    expires_in: int = Field(..., description="Lifetime of the token in seconds.")


class OAuthErrorResponse(BaseModel):
    """Error body returned by the authorize and token endpoints."""

    error: str
    error_description: str


__all__ = ["AuthorizeRequestParams", "OAuthErrorResponse", "TokenResponse"]
