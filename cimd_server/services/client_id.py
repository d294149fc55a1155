"""
Syntactic validation of client identifier URLs.

A client identifier is an HTTPS URL pointing at the client's metadata
document. The checks here never touch the network.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlsplit


class ClientIdFailure(str, Enum):
    MALFORMED_URL = "MalformedURL"
    SCHEME_NOT_HTTPS = "SchemeNotHttps"
    MISSING_PATH = "MissingPath"
    DOT_SEGMENT = "DotSegment"
    HAS_FRAGMENT = "HasFragment"
    HAS_USERINFO = "HasUserinfo"


_MESSAGES = {
    ClientIdFailure.MALFORMED_URL: "client_id must be a valid absolute URL",
    ClientIdFailure.SCHEME_NOT_HTTPS: "client_id URL MUST use the https scheme",
    ClientIdFailure.MISSING_PATH: "client_id URL MUST contain a path component",
    ClientIdFailure.DOT_SEGMENT: (
        "client_id URL MUST NOT contain single-dot or double-dot path segments"
    ),
    ClientIdFailure.HAS_FRAGMENT: "client_id URL MUST NOT contain a fragment component",
    ClientIdFailure.HAS_USERINFO: (
        "client_id URL MUST NOT contain a username or password component"
    ),
}


class InvalidClientIdError(Exception):
    """Raised when a client_id fails one of the URL shape rules."""

    def __init__(self, reason: ClientIdFailure) -> None:
        self.reason = reason
        self.message = _MESSAGES[reason]
        super().__init__(self.message)


def validate_client_id_url(raw: str) -> str:
    """Validate ``raw`` as a client identifier URL and return it as parsed.

    Rules are checked in a fixed order and the first violation wins.
    """
    if any(ord(char) < 0x21 or ord(char) == 0x7F for char in raw):
        raise InvalidClientIdError(ClientIdFailure.MALFORMED_URL)

    try:
        parts = urlsplit(raw)
        # Accessing the port validates it.
        parts.port
    except ValueError as exc:
        raise InvalidClientIdError(ClientIdFailure.MALFORMED_URL) from exc

    if not parts.scheme or not parts.hostname:
        raise InvalidClientIdError(ClientIdFailure.MALFORMED_URL)

    if parts.scheme != "https":
        raise InvalidClientIdError(ClientIdFailure.SCHEME_NOT_HTTPS)

    if parts.path in ("", "/"):
        raise InvalidClientIdError(ClientIdFailure.MISSING_PATH)

    if any(segment in (".", "..") for segment in parts.path.split("/")):
        raise InvalidClientIdError(ClientIdFailure.DOT_SEGMENT)

    # An empty fragment ("#" with nothing after it) still counts.
    if parts.fragment or "#" in raw:
        raise InvalidClientIdError(ClientIdFailure.HAS_FRAGMENT)

    if parts.username or parts.password:
        raise InvalidClientIdError(ClientIdFailure.HAS_USERINFO)

    return parts.geturl()


__all__ = ["ClientIdFailure", "InvalidClientIdError", "validate_client_id_url"]
