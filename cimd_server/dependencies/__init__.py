"""Expose dependency helpers for FastAPI routers."""

from .config import get_app_settings
from .services import (
    get_access_token_issuer,
    get_authorization_code_store,
    get_authorize_controller,
    get_metadata_fetcher,
    get_token_exchange_handler,
)

__all__ = [
    "get_access_token_issuer",
    "get_app_settings",
    "get_authorization_code_store",
    "get_authorize_controller",
    "get_metadata_fetcher",
    "get_token_exchange_handler",
]
