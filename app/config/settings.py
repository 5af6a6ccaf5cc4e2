from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Backend only; bypasses RLS on users/profiles

    # Object storage
    asset_bucket: str = "assets"  # Supabase Storage bucket for avatars and resumes
    resume_signed_url_expiry: int = 600

    # AWS S3 (optional; used instead of Supabase Storage when fully configured)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    session_token_expiry_seconds: int = 24 * 60 * 60
    reset_token_expiry_seconds: int = 60 * 60
    public_token_expiry_seconds: int = 2 * 60 * 60
    public_profile_id: str = "f135bcee-bad6-4634-86e1-36e77760932f"  # Profile exposed by the portfolio token

    # Passwords
    bcrypt_salt_rounds: int = 10

    # Password reset mail
    frontend_url: str = "http://localhost:4200"
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_from: str = '"Support" <support@example.com>'

    # App
    app_name: str = "portfolio-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:4200"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"  # login, forgot-password, reset-password
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
