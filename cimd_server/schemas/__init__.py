"""Public schema exports."""

from .metadata import ClientMetadataDocument
from .oauth import AuthorizeRequestParams, OAuthErrorResponse, TokenResponse

__all__ = [
    "AuthorizeRequestParams",
    "ClientMetadataDocument",
    "OAuthErrorResponse",
    "TokenResponse",
]
