from fastapi import APIRouter, Depends

from app.core.security import (
    AdminCredentials,
    authenticate_admin,
    get_admin_credentials,
    get_current_admin,
)
from app.core.exceptions import ValidationError
from app.core.logging_config import get_logger
from app.models.auth import AdminUser, LoginRequest, LoginResponse, VerifyResponse

logger = get_logger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    admin_account: AdminCredentials = Depends(get_admin_credentials)
):
    """Exchange the admin username and password for a session token"""
    if not credentials.username or not credentials.password:
        raise ValidationError("Username and password are required", error_code="MISSING_CREDENTIALS")

    token = authenticate_admin(credentials.username, credentials.password, admin_account)
    return LoginResponse(
        token=token,
        user=AdminUser(username=credentials.username, role="admin")
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify(current_admin: dict = Depends(get_current_admin)):
    """Return the claims of a still-valid token"""
    return VerifyResponse(user=current_admin)
