from datetime import datetime, timezone
from urllib.parse import urlencode
from fastapi import BackgroundTasks
from postgrest.exceptions import APIError
from supabase import Client
from app.core.errors import AuthError, BadRequestError, ConflictError, NotFoundError, UpstreamError
from app.core.security import PasswordHasher, TokenError, TokenService
from app.modules.auth.mailer import Mailer
from app.modules.auth.schemas import (
    AuthResponse, ForgotPasswordRequest, ForgotPasswordResponse, LoginRequest,
    MessageResponse, RegisterRequest, ResetPasswordRequest
)
from app.modules.users.schemas import UserPublic
from app.modules.users.service import UserService
import logging

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
FORGOT_PASSWORD_MESSAGE = "If this email exists, reset instructions will be sent."
INVALID_RESET_TOKEN = "Reset token is invalid or expired."
UNIQUE_VIOLATION = "23505"


class AuthService:
    def __init__(
        self,
        supabase: Client,
        hasher: PasswordHasher,
        tokens: TokenService,
        mailer: Mailer,
        frontend_url: str,
    ):
        self.supabase = supabase
        self.users = UserService(supabase)
        self.hasher = hasher
        self.tokens = tokens
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")

    def register(self, register_data: RegisterRequest) -> AuthResponse:
        """Create a credential row and return it with a fresh session token"""
        existing = self.users.get_user_by_email(register_data.email)
        if existing:
            raise ConflictError("User with this email already exists.")

        password_hash = self.hasher.hash(register_data.password)
        try:
            user = self.users.create_user(register_data.name, register_data.email, password_hash)
        except UpstreamError:
            # Lost a race with a concurrent registration; the unique index decides
            if self.users.get_user_by_email(register_data.email):
                raise ConflictError("User with this email already exists.")
            raise

        logger.info(f"Registered user {user['id']}")
        return AuthResponse(
            message="User registered successfully.",
            user=UserPublic(**user),
            token=self.tokens.issue_session_token(user),
        )

    def login(self, login_data: LoginRequest) -> AuthResponse:
        """Authenticate with email and password.

        Unknown accounts, lookup failures and wrong passwords all end in the
        same 401 so responses do not reveal which accounts exist.
        """
        try:
            user = self.users.get_user_by_email(login_data.email, with_password=True)
        except UpstreamError:
            user = None

        if user is None:
            self.hasher.dummy_verify(login_data.password)
            raise AuthError(INVALID_CREDENTIALS)
        if not self.hasher.verify(login_data.password, user.get("password_hash")):
            raise AuthError(INVALID_CREDENTIALS)

        public_user = {"id": user["id"], "name": user.get("name"), "email": user.get("email")}
        return AuthResponse(
            message="Login successful.",
            user=UserPublic(**public_user),
            token=self.tokens.issue_session_token(public_user),
        )

    def forgot_password(
        self,
        request: ForgotPasswordRequest,
        background_tasks: BackgroundTasks,
    ) -> ForgotPasswordResponse:
        """Queue a reset link when the account exists; the response is the same either way.

        Delivery runs after the response is sent, so SMTP latency neither
        holds the request nor shows which addresses have accounts.
        """
        user = self.users.get_user_by_email(request.email)
        if user:
            reset_token = self.tokens.issue_reset_token(user)
            reset_link = f"{self.frontend_url}/reset-password?{urlencode({'token': reset_token})}"
            background_tasks.add_task(self.send_reset_mail, user, reset_link)
        return ForgotPasswordResponse(status="success", message=FORGOT_PASSWORD_MESSAGE)

    def send_reset_mail(self, user: dict, reset_link: str) -> None:
        try:
            self.mailer.send_password_reset(user, reset_link)
        except Exception as e:
            logger.error(f"Failed to send password reset mail for user {user['id']}: {e}")

    def reset_password(self, request: ResetPasswordRequest) -> MessageResponse:
        """Replace the password of the reset token's subject; each token works once"""
        try:
            claims = self.tokens.verify_reset(request.token)
        except TokenError as e:
            logger.info(f"Rejected reset token: {e}")
            raise BadRequestError(INVALID_RESET_TOKEN)

        user = self.users.get_user_by_id(claims["sub"])
        if not user:
            raise NotFoundError("User not found.")

        self._claim_reset_token(claims)
        self.users.update_password(user["id"], self.hasher.hash(request.password))
        logger.info(f"Password reset for user {user['id']}")
        return MessageResponse(message="Password has been reset successfully.")

    def _claim_reset_token(self, claims: dict) -> None:
        """Record the token's jti; the primary key rejects a second use."""
        try:
            self.supabase.table("used_reset_tokens").insert({
                "jti": claims["jti"],
                "user_id": claims["sub"],
                "expires_at": datetime.fromtimestamp(claims["exp"], tz=timezone.utc).isoformat(),
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise BadRequestError("Reset token has already been used.")
            logger.error(f"Supabase error (claim reset token): {e}")
            raise UpstreamError("Error updating password.")
        except Exception as e:
            logger.error(f"Supabase error (claim reset token): {e}")
            raise UpstreamError("Error updating password.")
