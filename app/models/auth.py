from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    # Presence is checked in the endpoint so both fields share one error message
    username: Optional[str] = None
    password: Optional[str] = None


class AdminUser(BaseModel):
    username: str
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: AdminUser


class TokenClaims(AdminUser):
    exp: int
    iat: Optional[int] = None


class VerifyResponse(BaseModel):
    success: bool = True
    user: TokenClaims
