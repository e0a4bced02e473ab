"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain.tokens import TokenDescriptor, TokenError
from ..logging_conf import get_logger
from ..service import TokenAuthority

logger = get_logger("api.auth")

_bearer = HTTPBearer(auto_error=False)


def get_token_authority(request: Request) -> TokenAuthority:
    return request.app.state.token_authority


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error_code": code, "error_message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    authority: TokenAuthority = Depends(get_token_authority),
) -> TokenDescriptor:
    """Verify the bearer token and hand the route a TokenDescriptor."""
    if credentials is None:
        raise _unauthorized("missing_token", "Authorization: Bearer <token> is required")
    try:
        descriptor = await authority.verify_token(credentials.credentials)
    except TokenError as e:
        logger.warning("auth.rejected", extra={"event": "auth_rejected", "error_code": e.code})
        raise _unauthorized(e.code, str(e))
    # Picked up by the request logger once the route has run.
    request.state.key_id = descriptor.key_id
    return descriptor
