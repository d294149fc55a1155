"""Demonstration OAuth authorization server for Client ID Metadata Documents."""

__version__ = "0.1.0"
