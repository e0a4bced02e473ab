from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets

from pydantic import BaseModel, Field, ValidationError

__all__ = [
    "TOKEN_VERSION",
    "TokenPayload",
    "TokenDescriptor",
    "TokenError",
    "MalformedTokenError",
    "BadSignatureError",
    "RevokedTokenError",
    "new_key_id",
    "sign",
    "encode_token",
    "decode_token",
]

TOKEN_VERSION = 1


# ------------------------
# Errors
# ------------------------
class TokenError(ValueError):
    """Base class for bearer-token errors.

    The `code` attribute is what the API reports as `error_code`.
    """

    code: str = "invalid_token"


class MalformedTokenError(TokenError):
    code = "malformed_token"


class BadSignatureError(TokenError):
    code = "bad_signature"


class RevokedTokenError(TokenError):
    code = "revoked_token"


# ------------------------
# Schema
# ------------------------
class TokenPayload(BaseModel):
    """Signed body of a bearer token. Short field names keep tokens compact."""

    ver: int = Field(..., ge=1, le=1)
    kid: str = Field(..., min_length=1)  # key id; the revocation handle
    sub: str  # user the token was issued to
    iat: int  # issued-at epoch milliseconds


class TokenDescriptor(BaseModel):
    """A token that has already been verified against the token store."""

    key_id: str
    user: str
    issued_at: int


# ------------------------
# Internals
# ------------------------
def new_key_id() -> str:
    return secrets.token_hex(16)


def sign(data: bytes, secret: str) -> str:
    """Keyed BLAKE2b MAC over data, hex encoded."""
    return hashlib.blake2b(data, key=secret.encode("utf-8")[:64], digest_size=32).hexdigest()


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


# ------------------------
# Public encode/decode
# ------------------------
def encode_token(*, key_id: str, user: str, issued_at_ms: int, secret: str) -> str:
    """Create a `<base64url(payload)>.<mac>` bearer token."""
    payload = TokenPayload(ver=TOKEN_VERSION, kid=key_id, sub=user, iat=issued_at_ms)
    as_json = json.dumps(payload.model_dump(), separators=(",", ":"), ensure_ascii=False)
    body = _b64encode(as_json.encode("utf-8"))
    return f"{body}.{sign(body.encode('ascii'), secret)}"


def decode_token(token: str, *, secret: str) -> TokenPayload:
    """Check the MAC and decode a token back into a `TokenPayload`.

    Raises a specific `TokenError` subclass if parsing or validation fails.
    Whether the key id is still live is the token authority's concern.
    """
    body, sep, mac = token.partition(".")
    if not sep or not body or not mac:
        raise MalformedTokenError("Token must have the form <payload>.<signature>")

    try:
        expected = sign(body.encode("ascii"), secret)
    except UnicodeEncodeError as e:
        raise MalformedTokenError("Token is not ASCII") from e
    if not hmac.compare_digest(expected, mac):
        raise BadSignatureError("Token signature does not match")

    try:
        data = json.loads(_b64decode(body).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedTokenError("Token payload is malformed") from e

    try:
        return TokenPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedTokenError(f"Token schema invalid: {e}") from e
