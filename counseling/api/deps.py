from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from counseling.core.db import get_session
from counseling.core.security import ADMIN_ROLE, decode_access_token

optional_bearer = HTTPBearer(auto_error=False)

__all__ = ["get_session", "get_is_admin", "require_admin"]


async def get_is_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> bool:
    """Identity context for public routes: True only with a valid admin token."""
    if not credentials or credentials.scheme.lower() != "bearer":
        return False
    payload = decode_access_token(credentials.credentials)
    return bool(payload and payload.get("role") == ADMIN_ROLE)


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return payload["sub"]
