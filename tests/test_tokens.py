from __future__ import annotations

import pytest

from app.domain.tokens import (
    BadSignatureError,
    MalformedTokenError,
    RevokedTokenError,
    decode_token,
    encode_token,
)


def test_decode_returns_encoded_fields():
    tok = encode_token(key_id="abc123", user="alice", issued_at_ms=1700000000000, secret="s")
    payload = decode_token(tok, secret="s")
    assert (payload.kid, payload.sub, payload.iat) == ("abc123", "alice", 1700000000000)


def test_token_signed_with_other_secret_is_rejected():
    tok = encode_token(key_id="abc123", user="alice", issued_at_ms=1, secret="s")
    with pytest.raises(BadSignatureError):
        decode_token(tok, secret="other")


def test_tampered_payload_is_rejected():
    tok = encode_token(key_id="abc123", user="alice", issued_at_ms=1, secret="s")
    body, mac = tok.split(".")
    forged = encode_token(key_id="zzz", user="mallory", issued_at_ms=1, secret="s").split(".")[0]
    with pytest.raises(BadSignatureError):
        decode_token(f"{forged}.{mac}", secret="s")


@pytest.mark.parametrize("tok", ["", "nodot", ".abc", "abc."])
def test_malformed_tokens(tok):
    with pytest.raises(MalformedTokenError):
        decode_token(tok, secret="s")


@pytest.mark.asyncio
async def test_issue_then_verify(authority):
    tok = await authority.issue_token("alice")
    descriptor = await authority.verify_token(tok)
    assert descriptor.user == "alice"
    assert descriptor.key_id


@pytest.mark.asyncio
async def test_revoked_token_no_longer_verifies(authority):
    tok = await authority.issue_token("alice")
    descriptor = await authority.verify_token(tok)
    await authority.revoke_token(descriptor.key_id)
    with pytest.raises(RevokedTokenError):
        await authority.verify_token(tok)


@pytest.mark.asyncio
async def test_revoke_unknown_key_is_noop(authority):
    await authority.revoke_token("does-not-exist")
