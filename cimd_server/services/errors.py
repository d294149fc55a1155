"""OAuth error surfaced to callers of the authorize and token endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class OAuthError(Exception):
    """Terminal failure of a single authorize or token request.

    ``error`` is the stable wire category, ``description`` names the violated
    rule and ``reason`` keeps the specific internal failure when one exists.
    """

    def __init__(
        self,
        error: str,
        description: str,
        *,
        reason: Optional[Enum] = None,
    ) -> None:
        super().__init__(description)
        self.error = error
        self.description = description
        self.reason = reason

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "error_description": self.description}


__all__ = ["OAuthError"]
