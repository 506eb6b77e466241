"""
Token blacklist for sign-out

Revoked token JTIs are kept in memory until the token would have expired
anyway. For multi-instance deployments this should move to a shared store.
"""
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Optional

logger = logging.getLogger(__name__)


class TokenBlacklist:
    """In-memory JTI blacklist with expiry-based cleanup."""

    def __init__(self):
        # {jti: expiry_datetime}
        self._revoked_tokens: dict[str, datetime] = {}
        self._lock = Lock()

    def revoke_token(self, jti: str, expiry: datetime) -> None:
        """Revoke a specific token by its JTI."""
        self.cleanup_expired()
        with self._lock:
            self._revoked_tokens[jti] = expiry
        logger.info(f"Token revoked: {jti[:8]}...")

    def is_token_revoked(self, jti: Optional[str]) -> bool:
        if not jti:
            return False
        with self._lock:
            return jti in self._revoked_tokens

    def cleanup_expired(self) -> int:
        """
        Remove expired entries from the blacklist.

        Returns:
            Number of entries removed
        """
        now = datetime.now(timezone.utc)
        with self._lock:
            expired = [jti for jti, expiry in self._revoked_tokens.items() if expiry < now]
            for jti in expired:
                del self._revoked_tokens[jti]

        if expired:
            logger.debug(f"Token blacklist cleanup: removed {len(expired)} entries")
        return len(expired)


# Global singleton
token_blacklist = TokenBlacklist()
