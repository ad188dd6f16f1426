from __future__ import annotations

import os
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_database_url(url: str) -> str:
    """
    Force SQLAlchemy to use psycopg (v3) driver on Postgres.

    Accepts any of these and converts to postgresql+psycopg://
      - postgres://
      - postgresql://
      - postgresql+psycopg2://
      - postgresql+psycopg:// (already good)
    SQLite URLs are returned untouched.
    """
    if not url:
        return url

    # Remove hidden whitespace/newlines that often get pasted into env vars
    url = url.strip()

    if url.startswith("postgresql+psycopg://"):
        return url

    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+psycopg://", 1)

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)

    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)

    return url


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Field Service Reports"
    app_version: str = "1.0.0"

    # env: dev | prod
    env: str = os.getenv("ENV", os.getenv("APP_ENV", "prod")).lower()
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 90)))

    # Same cookie name is accepted by every protected route
    auth_cookie_name: str = os.getenv("AUTH_COOKIE_NAME", "jwt")
    cookie_expire_days: int = int(os.getenv("COOKIE_EXPIRE_DAYS", "90"))
    cookie_path: str = os.getenv("COOKIE_PATH", "/")
    cookie_samesite: str = os.getenv("COOKIE_SAMESITE", "lax")
    cookie_secure: bool = os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes") or (env != "dev")

    database_url: str = normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./dev.db"))

    # Comma separated: CORS_ORIGINS=http://a,http://b
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Spreadsheet uploads are spooled here and removed after every request
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")

    # Service reports stamp date_entered in a fixed regional offset (KSA = UTC+3)
    report_utc_offset_hours: int = int(os.getenv("REPORT_UTC_OFFSET_HOURS", "3"))

    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "ChangeMe123!")
    admin_name: str = os.getenv("ADMIN_NAME", "Administrator")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
