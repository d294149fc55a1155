"""
Factory functions to provide the shared engine components as FastAPI dependencies.
"""

from functools import lru_cache

from cimd_server.clients import ClientMetadataFetcher
from cimd_server.core.config import get_settings
from cimd_server.services import (
    AccessTokenIssuer,
    AuthorizationCodeStore,
    AuthorizeFlowController,
    TokenExchangeHandler,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for component factories."""
    return get_settings()


@lru_cache()
def get_metadata_fetcher() -> ClientMetadataFetcher:
    """Provide the client metadata fetcher."""
    settings = _settings()
    return ClientMetadataFetcher(timeout=settings.metadata.timeout_seconds)


@lru_cache()
def get_authorization_code_store() -> AuthorizationCodeStore:
    """Provide the process-wide authorization code store."""
    return AuthorizationCodeStore()


@lru_cache()
def get_access_token_issuer() -> AccessTokenIssuer:
    return AccessTokenIssuer()


@lru_cache()
def get_authorize_controller() -> AuthorizeFlowController:
    """Build the authorize flow controller from the shared components."""
    settings = _settings()
    return AuthorizeFlowController(
        fetcher=get_metadata_fetcher(),
        code_store=get_authorization_code_store(),
        login=settings.login,
    )


@lru_cache()
def get_token_exchange_handler() -> TokenExchangeHandler:
    """Build the token exchange handler sharing the authorize code store."""
    return TokenExchangeHandler(
        code_store=get_authorization_code_store(),
        token_issuer=get_access_token_issuer(),
    )


__all__ = [
    "get_access_token_issuer",
    "get_authorization_code_store",
    "get_authorize_controller",
    "get_metadata_fetcher",
    "get_token_exchange_handler",
]
