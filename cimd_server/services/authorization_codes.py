"""
In-memory storage for pending authorization codes.

Codes live for a fixed window and can be redeemed exactly once. The map is
guarded by a single lock so the lookup, expiry check and removal performed
by ``redeem`` happen as one step even when requests race.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

CODE_TTL = timedelta(minutes=10)
# 32 random bytes, base64url-encoded without padding.
CODE_ENTROPY_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CodeFailure(str, Enum):
    CODE_NOT_FOUND = "CodeNotFound"
    CODE_EXPIRED = "CodeExpired"


class AuthorizationCodeError(Exception):
    """Raised when a code cannot be redeemed."""

    def __init__(self, reason: CodeFailure, message: str) -> None:
        self.reason = reason
        self.message = message
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class AuthorizationCode:
    """A single pending grant."""

    code: str
    client_id: str
    redirect_uri: str
    state: Optional[str]
    issued_at: datetime
    ttl: timedelta = CODE_TTL

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + self.ttl

    def is_expired(self, now: datetime) -> bool:
        return now - self.issued_at > self.ttl


@dataclass(frozen=True, slots=True)
class RedeemedGrant:
    """The data a code was bound to, handed out once on redemption."""

    client_id: str
    redirect_uri: str
    state: Optional[str]


class AuthorizationCodeStore:
    """Issue and redeem single-use authorization codes."""

    def __init__(
        self,
        *,
        ttl: timedelta = CODE_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._codes: Dict[str, AuthorizationCode] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._codes)

    def issue(
        self, client_id: str, redirect_uri: str, state: Optional[str] = None
    ) -> AuthorizationCode:
        """Mint a fresh code bound to the client and redirect URI."""
        self.purge_expired()
        # No fallback: a failing randomness source aborts the request.
        value = secrets.token_urlsafe(CODE_ENTROPY_BYTES)
        code = AuthorizationCode(
            code=value,
            client_id=client_id,
            redirect_uri=redirect_uri,
            state=state,
            issued_at=self._clock(),
            ttl=self._ttl,
        )
        with self._lock:
            self._codes[value] = code
        logger.info("Issued authorization code for client %s", client_id)
        return code

    def redeem(self, code_value: str) -> RedeemedGrant:
        """Consume ``code_value``; a second attempt always sees CodeNotFound."""
        with self._lock:
            code = self._codes.pop(code_value, None)
            now = self._clock()

        if code is None:
            raise AuthorizationCodeError(
                CodeFailure.CODE_NOT_FOUND, "Invalid or expired authorization code"
            )
        if code.is_expired(now):
            raise AuthorizationCodeError(
                CodeFailure.CODE_EXPIRED, "Authorization code has expired"
            )
        return RedeemedGrant(
            client_id=code.client_id,
            redirect_uri=code.redirect_uri,
            state=code.state,
        )

    def purge_expired(self) -> int:
        """Drop every expired code and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [
                value for value, code in self._codes.items() if code.is_expired(now)
            ]
            for value in expired:
                del self._codes[value]
        if expired:
            logger.debug("Purged %d expired authorization codes", len(expired))
        return len(expired)


__all__ = [
    "AuthorizationCode",
    "AuthorizationCodeError",
    "AuthorizationCodeStore",
    "CODE_TTL",
    "CodeFailure",
    "RedeemedGrant",
]
