"""Expose outbound client wrappers."""

from .metadata import ClientMetadataError, ClientMetadataFetcher

__all__ = ["ClientMetadataError", "ClientMetadataFetcher"]
