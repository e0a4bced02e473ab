from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..domain.tokens import TokenDescriptor
from ..logging_conf import get_logger
from ..service import TokenAuthority
from .deps import get_token_authority, require_token

logout_router = APIRouter(tags=["auth"])
logger = get_logger("api")


@logout_router.post("/", summary="Log out the current user")
async def logout(
    token: TokenDescriptor = Depends(require_token),
    authority: TokenAuthority = Depends(get_token_authority),
) -> JSONResponse:
    """Revoke the caller's token. Revocation failures propagate to the host error handler."""
    await authority.revoke_token(token.key_id)
    logger.info("logout", extra={"event": "logout", "key_id": token.key_id, "user": token.user})
    return JSONResponse(status_code=200, content={})
