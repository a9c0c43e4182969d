# Fichier: app/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
from pydantic import ValidationError, field_validator
import sys

class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ENVIRONMENT: str = "development"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    FRONTEND_BASE_URL: Optional[str] = None

    # --- Auth configuration ---
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Content generation provider (OpenAI-compatible endpoint) ---
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    CONTENT_MODEL: str = "google/gemma-3n-e4b-it:free"
    CONTENT_PROVIDER_TIMEOUT_SECONDS: float = 60.0

    # --- Video lookup provider ---
    YOUTUBE_API_KEY: Optional[str] = None
    YOUTUBE_TIMEOUT_SECONDS: float = 10.0
    VIDEO_LOOKUP_CONCURRENCY: int = 16

    # Progress gating
    ENFORCE_SEQUENTIAL_UNLOCK: bool = True

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the asyncpg driver.

        Managed Postgres providers still hand out ``postgres://`` URLs, an alias
        SQLAlchemy no longer ships. Those, along with ``postgresql://`` and the
        psycopg variants, are upgraded to ``postgresql+asyncpg://`` so the async
        engine boots. SQLite and other backends are left untouched.
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
                return target + value[len(prefix) :]

        return value

    @field_validator("VIDEO_LOOKUP_CONCURRENCY")
    @classmethod
    def _at_least_one_lookup(cls, value: int) -> int:
        return max(int(value), 1)

def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The Settings model is instantiated at import time, so a missing variable
    surfaces as a bare traceback. The structured error payload is printed to
    stderr first so the faulty variable shows up in server logs.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    try:
        details = exc.errors()
    except Exception:  # pragma: no cover - extremely defensive
        details = None

    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint_parts = [message]
            if type_name:
                hint_parts.append(f"(type={type_name})")
            hint = " ".join(hint_parts)
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
