"""
Core dependencies for bearer authentication and role gating
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.config.settings import settings
from app.core.errors import AuthError, AuthorizationError
from app.core.security import ROLE_USER, PasswordHasher, TokenError, TokenService
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 rather than 403
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = ROLE_USER


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        session_expiry_seconds=settings.session_token_expiry_seconds,
        reset_expiry_seconds=settings.reset_token_expiry_seconds,
        public_expiry_seconds=settings.public_token_expiry_seconds,
    )


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_salt_rounds)


def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """Resolve the caller from the Authorization header and attach it to the request"""
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing token")
    try:
        claims = tokens.verify_access(credentials.credentials)
    except TokenError as e:
        logger.debug(f"Bearer token rejected: {e}")
        raise AuthError("Invalid or expired token")

    user = CurrentUser(
        id=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
        role=claims.get("role") or ROLE_USER,
    )
    request.state.user = user
    return user


def require_user(user: CurrentUser = Depends(verify_token)) -> CurrentUser:
    """Only interactive user tokens may pass; the shared portfolio token is read-only"""
    if user.role != ROLE_USER:
        raise AuthorizationError("Login required")
    return user


def allow_public(user: CurrentUser = Depends(verify_token)) -> CurrentUser:
    """Any verified token, whatever its role. Marks a route as intentionally public-readable."""
    return user
