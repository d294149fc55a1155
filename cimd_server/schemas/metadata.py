"""Pydantic models describing client metadata documents."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ClientMetadataDocument(BaseModel):
    """A client metadata document that passed the trust checks.

    Instances are transient: they are built from a fresh fetch on every
    authorize request and never stored.
    """

    client_id: str = Field(
        ..., description="Equal to the exact URL the document was fetched from."
    )
    redirect_uris: List[str] = Field(
        default_factory=list,
        description="Registered redirect URIs, compared by exact string match.",
    )
    token_endpoint_auth_method: Optional[str] = None
    client_name: Optional[str] = None
    client_uri: Optional[str] = None
    logo_uri: Optional[str] = None
    scope: Optional[str] = None
    raw: Dict[str, Any] = Field(
        default_factory=dict, description="The document exactly as fetched."
    )

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ClientMetadataDocument":
        """Build a document from an already validated JSON object."""
        redirect_uris = payload.get("redirect_uris")
        if isinstance(redirect_uris, list):
            redirect_uris = [uri for uri in redirect_uris if isinstance(uri, str)]
        else:
            redirect_uris = []

        auth_method = payload.get("token_endpoint_auth_method")
        return cls(
            client_id=payload["client_id"],
            redirect_uris=redirect_uris,
            token_endpoint_auth_method=(
                str(auth_method) if auth_method is not None else None
            ),
            client_name=_optional_str(payload.get("client_name")),
            client_uri=_optional_str(payload.get("client_uri")),
            logo_uri=_optional_str(payload.get("logo_uri")),
            scope=_optional_str(payload.get("scope")),
            raw=dict(payload),
        )


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


__all__ = ["ClientMetadataDocument"]
