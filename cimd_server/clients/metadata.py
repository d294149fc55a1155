"""
Client metadata document retrieval.

The client_id URL is dereferenced with a single GET and the returned JSON is
checked against the rules a client metadata document must satisfy before the
client is trusted. Nothing is cached: every call performs a fresh fetch.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

import httpx

from cimd_server.schemas.metadata import ClientMetadataDocument

logger = logging.getLogger(__name__)


class MetadataFailure(str, Enum):
    FETCH_FAILED = "FetchFailed"
    FETCH_TIMEOUT = "FetchTimeout"
    INVALID_JSON = "InvalidJson"
    NOT_AN_OBJECT = "NotAnObject"
    MISSING_CLIENT_ID = "MissingClientId"
    CLIENT_ID_MISMATCH = "ClientIdMismatch"
    FORBIDDEN_AUTH_METHOD = "ForbiddenAuthMethod"
    SECRET_PRESENT = "SecretPresent"
    SECRET_EXPIRY_PRESENT = "SecretExpiryPresent"


_MESSAGES = {
    MetadataFailure.FETCH_FAILED: "failed to fetch client metadata document",
    MetadataFailure.FETCH_TIMEOUT: "timed out fetching client metadata document",
    MetadataFailure.INVALID_JSON: "client metadata document is not valid JSON",
    MetadataFailure.NOT_AN_OBJECT: "client metadata document must be a JSON object",
    MetadataFailure.MISSING_CLIENT_ID: "client metadata document MUST contain client_id",
    MetadataFailure.CLIENT_ID_MISMATCH: (
        "client_id property in metadata document MUST match the document URL"
    ),
    MetadataFailure.FORBIDDEN_AUTH_METHOD: (
        "token_endpoint_auth_method MUST NOT be a shared secret based method"
    ),
    MetadataFailure.SECRET_PRESENT: "client_secret MUST NOT be present in client metadata",
    MetadataFailure.SECRET_EXPIRY_PRESENT: (
        "client_secret_expires_at MUST NOT be present in client metadata"
    ),
}

_SHARED_SECRET_METHODS = frozenset(
    {"client_secret_post", "client_secret_basic", "client_secret_jwt"}
)


class ClientMetadataError(Exception):
    """Raised when a metadata document cannot be fetched or is not trustworthy."""

    def __init__(self, reason: MetadataFailure, detail: Optional[str] = None) -> None:
        self.reason = reason
        message = _MESSAGES[reason]
        self.message = f"{message} ({detail})" if detail else message
        super().__init__(self.message)


def validate_client_metadata(client_id_url: str, payload: Any) -> ClientMetadataDocument:
    """Check a parsed metadata document against the URL it was fetched from."""
    if not isinstance(payload, dict):
        raise ClientMetadataError(MetadataFailure.NOT_AN_OBJECT)

    if "client_id" not in payload:
        raise ClientMetadataError(MetadataFailure.MISSING_CLIENT_ID)

    # Exact string comparison; neither side is normalized.
    if payload["client_id"] != client_id_url:
        raise ClientMetadataError(MetadataFailure.CLIENT_ID_MISMATCH)

    auth_method = payload.get("token_endpoint_auth_method")
    if auth_method is not None:
        method = str(auth_method)
        if method in _SHARED_SECRET_METHODS or method.startswith("client_secret_"):
            raise ClientMetadataError(MetadataFailure.FORBIDDEN_AUTH_METHOD)

    if "client_secret" in payload:
        raise ClientMetadataError(MetadataFailure.SECRET_PRESENT)
    if "client_secret_expires_at" in payload:
        raise ClientMetadataError(MetadataFailure.SECRET_EXPIRY_PRESENT)

    return ClientMetadataDocument.from_payload(payload)


class ClientMetadataFetcher:
    """Fetch and validate client metadata documents over HTTPS."""

    ACCEPT = "application/json, application/*+json"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch_and_validate(self, client_id_url: str) -> ClientMetadataDocument:
        """Retrieve the document at ``client_id_url`` and validate its content."""
        payload = await self._fetch_json(client_id_url)
        document = validate_client_metadata(client_id_url, payload)
        logger.info(
            "Client metadata validated for %s (client_name=%s)",
            client_id_url,
            document.client_name,
        )
        return document

    async def _fetch_json(self, client_id_url: str) -> Any:
        logger.debug("Fetching client metadata from %s", client_id_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    client_id_url, headers={"Accept": self.ACCEPT}
                )
        except httpx.TimeoutException as exc:
            raise ClientMetadataError(MetadataFailure.FETCH_TIMEOUT) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise ClientMetadataError(MetadataFailure.FETCH_FAILED) from exc

        if not response.is_success:
            raise ClientMetadataError(
                MetadataFailure.FETCH_FAILED, f"HTTP {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ClientMetadataError(MetadataFailure.INVALID_JSON) from exc


__all__ = [
    "ClientMetadataError",
    "ClientMetadataFetcher",
    "MetadataFailure",
    "validate_client_metadata",
]
