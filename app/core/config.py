# Fichier: app/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
from pydantic import AnyHttpUrl, ValidationError, field_validator
import sys


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ENVIRONMENT: str = "development"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
    ]

    # --- Auth ---
    # Tokens are issued by the hosted auth service and signed with SECRET_KEY.
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    SUPER_ADMIN_EMAILS: List[str] = []

    # --- Supabase Storage (curriculum cover images) ---
    SUPABASE_URL: Optional[AnyHttpUrl] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "curriculum-images"
    STORAGE_CACHE_CONTROL: str = "3600"
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    # --- AI prompt defaults ---
    DEFAULT_AI_MAX_COMPLETION_TOKENS: int = 800

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Force Postgres URLs onto the asyncpg driver.

        Supabase hands out ``postgres://`` connection strings, which SQLAlchemy
        no longer resolves. Those, plain ``postgresql://`` and psycopg variants
        are rewritten to ``postgresql+asyncpg://``; SQLite URLs are untouched.
        """

        if not isinstance(value, str):
            return value

        if "+asyncpg" in value:
            return value

        replacements = {
            "postgres://": "postgresql+asyncpg://",
            "postgresql://": "postgresql+asyncpg://",
            "postgresql+psycopg2://": "postgresql+asyncpg://",
            "postgresql+psycopg://": "postgresql+asyncpg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix):]

        return value

    @field_validator("SUPER_ADMIN_EMAILS", mode="after")
    @classmethod
    def _lowercase_emails(cls, value: List[str]) -> List[str]:
        return [email.strip().lower() for email in value if email and email.strip()]


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Print every missing or invalid environment variable before failing.

    The exception is raised while the module is imported, so without this the
    offending variable is easy to miss in deployment logs.
    """

    print("Configuration error while loading environment variables:", file=sys.stderr)

    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Unknown validation error")
        type_name = error.get("type")
        hint = f"{message} (type={type_name})" if type_name else message
        print(f"  - {location}: {hint}", file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
