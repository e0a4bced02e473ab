from __future__ import annotations

import time

from ..db import Database
from ..domain.tokens import (
    RevokedTokenError,
    TokenDescriptor,
    decode_token,
    encode_token,
    new_key_id,
)
from ..logging_conf import get_logger

logger = get_logger("service.tokens")


def now_ms() -> int:
    """Return current time in epoch milliseconds."""
    return int(time.time() * 1000)


class TokenAuthority:
    """Issues, verifies and revokes bearer tokens keyed by a stored key id."""

    def __init__(self, db: Database, *, secret: str):
        self.db = db
        self.secret = secret

    async def issue_token(self, user: str) -> str:
        key_id = new_key_id()
        issued_at = now_ms()
        await self.db.create_token(key_id, user, issued_at)
        logger.info("token.issue", extra={"event": "token_issue", "key_id": key_id, "user": user})
        return encode_token(key_id=key_id, user=user, issued_at_ms=issued_at, secret=self.secret)

    async def verify_token(self, token: str) -> TokenDescriptor:
        """Return the descriptor for a live token.

        Raises a `TokenError` subclass for malformed, forged or revoked tokens.
        """
        payload = decode_token(token, secret=self.secret)
        row = await self.db.get_token(payload.kid)
        if row is None:
            raise RevokedTokenError("Token has been revoked")
        return TokenDescriptor(key_id=row["key_id"], user=row["user"], issued_at=row["issued_at"])

    async def revoke_token(self, key_id: str) -> None:
        """Forget key_id; revoking an unknown id is a no-op."""
        await self.db.delete_token(key_id)
        logger.info("token.revoke", extra={"event": "token_revoke", "key_id": key_id})
