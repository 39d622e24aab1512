import logging

from fastapi import APIRouter, Depends, HTTPException, status

from counseling.api.deps import get_is_admin
from counseling.api.schemas.auth import AdminLoginRequest, AdminStatus, TokenResponse
from counseling.core.config import settings
from counseling.core.security import create_access_token, verify_admin_credentials

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=TokenResponse)
async def login(body: AdminLoginRequest) -> TokenResponse:
    if not verify_admin_credentials(body.username, body.password):
        logger.warning("Failed admin login for username=%s", body.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    return TokenResponse(
        access_token=create_access_token(body.username),
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get("/me", response_model=AdminStatus)
async def me(is_admin: bool = Depends(get_is_admin)) -> AdminStatus:
    return AdminStatus(is_admin=is_admin)
