"""Exact-match validation of requested redirect URIs."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from cimd_server.schemas.metadata import ClientMetadataDocument


class RedirectFailure(str, Enum):
    MISSING_REDIRECT_URI = "MissingRedirectUri"
    MISSING_REGISTERED_URIS = "MissingRegisteredUris"
    NO_EXACT_MATCH = "NoExactMatch"


_MESSAGES = {
    RedirectFailure.MISSING_REDIRECT_URI: "redirect_uri is required",
    RedirectFailure.MISSING_REGISTERED_URIS: (
        "client metadata must include a non-empty redirect_uris array"
    ),
    RedirectFailure.NO_EXACT_MATCH: (
        "redirect_uri MUST exactly match one of the registered redirect_uris"
    ),
}


class RedirectUriError(Exception):
    """Raised when a redirect_uri is not registered for the client."""

    def __init__(self, reason: RedirectFailure) -> None:
        self.reason = reason
        self.message = _MESSAGES[reason]
        super().__init__(self.message)


def match_redirect_uri(
    requested: Optional[str], document: ClientMetadataDocument
) -> str:
    """Return ``requested`` if it is registered in ``document``.

    Comparison is byte-for-byte: no case folding, no trailing-slash tolerance
    and no scheme or host normalization.
    """
    if not requested:
        raise RedirectUriError(RedirectFailure.MISSING_REDIRECT_URI)
    if not document.redirect_uris:
        raise RedirectUriError(RedirectFailure.MISSING_REGISTERED_URIS)
    if requested not in document.redirect_uris:
        raise RedirectUriError(RedirectFailure.NO_EXACT_MATCH)
    return requested


__all__ = ["RedirectFailure", "RedirectUriError", "match_redirect_uri"]
