"""Service layer exports."""

from .access_tokens import AccessTokenIssuer
from .authorization_codes import AuthorizationCodeStore
from .authorize import AuthorizeFlowController, AuthorizeRedirect, CredentialChallenge
from .errors import OAuthError
from .token_exchange import TokenExchangeHandler

__all__ = [
    "AccessTokenIssuer",
    "AuthorizationCodeStore",
    "AuthorizeFlowController",
    "AuthorizeRedirect",
    "CredentialChallenge",
    "OAuthError",
    "TokenExchangeHandler",
]
