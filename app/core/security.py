"""
Password hashing and bearer token management.

Both classes take their configuration through the constructor; the FastAPI
dependencies in ``app.core.dependencies`` build them from settings once.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

ROLE_USER = "user"
ROLE_PUBLIC = "public"
TOKEN_TYPE_PASSWORD_RESET = "password-reset"

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class TokenError(Exception):
    """Token could not be verified or is of the wrong kind."""


class PasswordHasher:
    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._dummy_hash: Optional[bytes] = None

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt (auto-salted, configured work factor)."""
        return bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode())
        except (ValueError, TypeError):
            return False

    def dummy_verify(self, password: str) -> bool:
        """Spend one comparison's worth of work for logins against unknown accounts."""
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=self.rounds))
        bcrypt.checkpw(self._encode(password), self._dummy_hash)
        return False


class TokenService:
    """Issues and verifies HS256-signed session, reset and portfolio tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        session_expiry_seconds: int = 24 * 60 * 60,
        reset_expiry_seconds: int = 60 * 60,
        public_expiry_seconds: int = 2 * 60 * 60,
    ):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self.secret = secret
        self.algorithm = algorithm
        self.session_expiry_seconds = session_expiry_seconds
        self.reset_expiry_seconds = reset_expiry_seconds
        self.public_expiry_seconds = public_expiry_seconds

    def _encode(self, claims: Dict[str, Any], expires_in: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {k: v for k, v in claims.items() if v is not None}
        payload.update({"iat": now, "exp": now + timedelta(seconds=expires_in)})
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_session_token(self, user: Dict[str, Any]) -> str:
        return self._encode(
            {
                "sub": str(user["id"]),
                "email": user.get("email"),
                "name": user.get("name"),
                "role": ROLE_USER,
            },
            self.session_expiry_seconds,
        )

    def issue_reset_token(self, user: Dict[str, Any]) -> str:
        return self._encode(
            {
                "sub": str(user["id"]),
                "email": user.get("email"),
                "type": TOKEN_TYPE_PASSWORD_RESET,
                "jti": uuid.uuid4().hex,
            },
            self.reset_expiry_seconds,
        )

    def issue_public_token(self, subject: str) -> str:
        """Read-only token for the public portfolio profile."""
        return self._encode({"sub": str(subject), "role": ROLE_PUBLIC}, self.public_expiry_seconds)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode ``token`` and return its claims.

        Raises ``TokenError`` when the signature is invalid, the token has
        expired, or it is malformed or lacks ``sub``/``exp``.
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as e:
            raise TokenError(str(e)) from e

    def verify_access(self, token: str) -> Dict[str, Any]:
        """Claims of a bearer credential; purpose-bound tokens are refused."""
        claims = self.verify(token)
        if claims.get("type"):
            raise TokenError(f"{claims['type']} token cannot be used for authentication")
        return claims

    def verify_reset(self, token: str) -> Dict[str, Any]:
        """Claims of a password reset token; any other kind is refused."""
        claims = self.verify(token)
        if claims.get("type") != TOKEN_TYPE_PASSWORD_RESET:
            raise TokenError("not a password reset token")
        if not claims.get("jti"):
            raise TokenError("reset token has no jti")
        return claims
