from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os


class Settings(BaseSettings):
    # Application
    app_name: str = os.getenv(
        "APP_NAME", "Lawdesk Case Management")  # .env: APP_NAME
    app_version: str = os.getenv("APP_VERSION", "1.0.0")  # .env: APP_VERSION
    debug: bool = os.getenv("DEBUG", "true").lower() == "true"  # .env: DEBUG

    # Database
    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./lawdesk.db"
    )  # .env: DATABASE_URL

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "")  # .env: SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))  # .env: ACCESS_TOKEN_EXPIRE_MINUTES

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Initialize allowed_origins from environment (avoiding JSON parsing)
        origins_str = os.getenv(
            "ALLOWED_ORIGINS",
            "http://localhost:3000,http://localhost:5173,"
            "http://127.0.0.1:3000,http://127.0.0.1:5173"
        )
        object.__setattr__(self, 'allowed_origins', [
            origin.strip() for origin in origins_str.split(",")
        ])

        # Only enforce SECRET_KEY requirement in production
        if not self.secret_key and not self.debug:
            raise ValueError(
                "SECRET_KEY environment variable is required in production")
        elif not self.secret_key and self.debug:
            # Generate a temporary secret key for development
            import secrets
            self.secret_key = secrets.token_urlsafe(32)

    # File storage
    # Only s3 and local are supported; cloudinary is not
    storage_provider: str = os.getenv(
        "STORAGE_PROVIDER", "s3").lower()  # .env: STORAGE_PROVIDER (s3 | local)
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")  # .env: UPLOAD_DIR
    upload_base_url: str = os.getenv(
        "UPLOAD_BASE_URL", "/uploads")  # .env: UPLOAD_BASE_URL

    # AWS S3 Configuration
    aws_access_key_id: Optional[str] = os.getenv(
        "AWS_ACCESS_KEY_ID")  # .env: AWS_ACCESS_KEY_ID
    aws_secret_access_key: Optional[str] = os.getenv(
        "AWS_SECRET_ACCESS_KEY")  # .env: AWS_SECRET_ACCESS_KEY
    aws_region: str = os.getenv(
        "AWS_REGION", "eu-west-1")  # .env: AWS_REGION
    s3_bucket_name: str = os.getenv(
        "S3_BUCKET_NAME", "lawdesk-documents")  # .env: S3_BUCKET_NAME
    s3_endpoint_url: Optional[str] = os.getenv(
        "S3_ENDPOINT_URL")  # .env: S3_ENDPOINT_URL

    # Email
    smtp_server: Optional[str] = os.getenv("SMTP_SERVER")  # .env: SMTP_SERVER
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))  # .env: SMTP_PORT
    smtp_username: Optional[str] = os.getenv(
        "SMTP_USERNAME")  # .env: SMTP_USERNAME
    smtp_password: Optional[str] = os.getenv(
        "SMTP_PASSWORD")  # .env: SMTP_PASSWORD
    smtp_use_tls: bool = os.getenv(
        "SMTP_USE_TLS", "true").lower() == "true"  # .env: SMTP_USE_TLS
    from_email: str = os.getenv(
        "FROM_EMAIL", "notifications@lawdesk.app")  # .env: FROM_EMAIL
    default_firm_name: str = os.getenv(
        "DEFAULT_FIRM_NAME", "Lawdesk")  # .env: DEFAULT_FIRM_NAME

    # Frontend URL for email links
    frontend_url: str = os.getenv(
        "FRONTEND_URL", "http://localhost:5173")  # .env: FRONTEND_URL

    # Reminders
    # Skip scan candidates that already have a notification for the same
    # recipient, case, type and event date.
    reminder_dedupe: bool = os.getenv(
        "REMINDER_DEDUPE", "false").lower() == "true"  # .env: REMINDER_DEDUPE

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")  # .env: LOG_LEVEL
    log_file: str = os.getenv("LOG_FILE", "app.log")  # .env: LOG_FILE

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env file
    )


settings = Settings()
