"""Admin authentication: credential check, session tokens and the request guard."""
import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from app.core.logging_config import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class AdminCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"AdminCredentials(username={self.username!r}, password='***')"


def get_admin_credentials() -> AdminCredentials:
    """Dependency providing the configured admin account."""
    settings = get_settings()
    return AdminCredentials(username=settings.ADMIN_USERNAME, password=settings.ADMIN_PASSWORD)


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def verify_admin_credentials(username: str, password: str, credentials: AdminCredentials) -> bool:
    # Both comparisons always run so timing does not reveal which field was wrong
    username_ok = _matches(username, credentials.username)
    password_ok = _matches(password, credentials.password)
    return username_ok and password_ok


def create_access_token(username: str, now: Optional[datetime] = None) -> str:
    """Issue a signed admin session token valid for ACCESS_TOKEN_EXPIRE_HOURS."""
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "username": username,
        "role": ADMIN_ROLE,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a session token and return its claims.

    Raises:
        InvalidTokenError: bad signature, malformed token, expired token or
            missing username/exp claims
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "username"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token has expired", error_code="TOKEN_EXPIRED")
    except jwt.PyJWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}", error_code="TOKEN_INVALID")


def authenticate_admin(username: str, password: str, credentials: AdminCredentials) -> str:
    """Check a login attempt against the admin account and issue a token."""
    if not verify_admin_credentials(username, password, credentials):
        logger.warning("Failed admin login attempt")
        raise InvalidCredentialsError("Invalid credentials", error_code="INVALID_CREDENTIALS")
    logger.info(f"Admin logged in: {username}")
    return create_access_token(username)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_admin(request: Request) -> Dict[str, Any]:
    """Guard for admin-only routes; the decoded claims end up in request.state.admin."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise AuthenticationError("No token provided", error_code="NO_TOKEN")

    try:
        claims = decode_access_token(token)
    except InvalidTokenError as e:
        logger.info(f"Rejected token on {request.method} {request.url.path}: {e.error_code}")
        raise AuthenticationError("Invalid or expired token", error_code=e.error_code)

    request.state.admin = claims
    return claims
