from fastapi import APIRouter, BackgroundTasks, Depends, Request
from app.config.settings import settings
from app.core.dependencies import get_password_hasher, get_token_service
from app.core.rate_limit import limiter
from app.core.security import PasswordHasher, TokenService
from app.database.supabase_client import get_supabase
from app.modules.auth.mailer import Mailer
from app.modules.auth.schemas import (
    AuthResponse, ForgotPasswordRequest, ForgotPasswordResponse, LoginRequest,
    MessageResponse, RegisterRequest, ResetPasswordRequest
)
from app.modules.auth.service import AuthService
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])

# Handlers are sync so bcrypt and the Supabase client run in the threadpool.


def get_mailer() -> Mailer:
    return Mailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        sender=settings.smtp_from,
        enabled=settings.is_production,
    )


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(supabase, hasher, tokens, mailer, settings.frontend_url)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get a session token"""
    return service.login(login_data)


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit(settings.auth_rate_limit)
def forgot_password(
    request: Request,
    forgot_data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service)
):
    """Request a password reset link"""
    return service.forgot_password(forgot_data, background_tasks)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
def reset_password(
    request: Request,
    reset_data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password using a reset token"""
    return service.reset_password(reset_data)
