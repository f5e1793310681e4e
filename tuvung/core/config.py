# Fichier: tuvung/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pydantic import AnyHttpUrl, ValidationError, field_validator
import sys

class Settings(BaseSettings):
    PROJECT_NAME: str = "tuvung"
    ENVIRONMENT: str = "development"
    DATABASE_URL: str = "sqlite:///./tuvung.db"

    # "sql" talks to DATABASE_URL through SQLAlchemy, "supabase" to PostgREST.
    GATEWAY_BACKEND: str = "sql"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # --- Supabase configuration ---
    SUPABASE_URL: AnyHttpUrl | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_SCHEMA: str = "public"
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Storage buckets ---
    WORD_IMAGE_BUCKET: str = "word-images"
    WORD_AUDIO_BUCKET: str = "word-audios"
    LECTURE_COVER_BUCKET: str = "lecture-covers"
    STORAGE_CACHE_CONTROL: str = "3600"

    # --- Outbound HTTP (gateway + enrichment) ---
    HTTP_TIMEOUT_SECONDS: float = 10.0
    DICTIONARY_API_URL: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    DATAMUSE_API_URL: str = "https://api.datamuse.com"
    TRANSLATE_API_URL: str = "https://api.mymemory.translated.net/get"
    TRANSLATE_SOURCE_LANG: str = "en"
    LOOKUP_DEBOUNCE_MS: int = 500

    # --- Practice sessions ---
    PRACTICE_CORRECT_DELAY_MS: int = 600
    PRACTICE_WRONG_DELAY_MS: int = 900
    PRACTICE_MAX_QUESTIONS: int = 500
    PRACTICE_SESSION_TTL_MINUTES: int = 180
    PRACTICE_MISS_NOTE: str = "Sai trong luyện tập"

    # Roll the visual order back when persisting a reorder fails.
    REORDER_ROLLBACK_ON_FAILURE: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Point bare Postgres URLs at the psycopg (v3) driver.

        Supabase exposes connection strings with the ``postgres://`` scheme,
        which SQLAlchemy no longer accepts. SQLite and URLs that already name
        a driver are left untouched.
        """

        if not isinstance(value, str):
            return value

        replacements = {
            "postgres://": "postgresql+psycopg://",
            "postgresql://": "postgresql+psycopg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @field_validator("GATEWAY_BACKEND", mode="before")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        normalized = (value or "sql").strip().lower()
        if normalized not in {"sql", "supabase"}:
            raise ValueError("GATEWAY_BACKEND must be 'sql' or 'supabase'")
        return normalized

    @property
    def supabase_base_url(self) -> Optional[str]:
        if not self.SUPABASE_URL:
            return None
        return str(self.SUPABASE_URL).rstrip("/")


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Report which environment variables are missing or invalid.

    Settings are built at import time, so without this the traceback only
    shows a pydantic error deep inside the first module importing ``settings``.
    """

    errors = exc.errors()
    missing = [str(error["loc"][0]) for error in errors if error.get("type") == "missing" and error.get("loc")]
    invalid = [error for error in errors if error.get("type") != "missing"]

    lines = [f"tuvung: cannot load settings ({exc.error_count()} error(s))"]
    if missing:
        lines.append(f"  missing: {', '.join(missing)}")
    for error in invalid:
        name = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        lines.append(f"  {name}: {error.get('msg', 'invalid value')}")
    print("\n".join(lines), file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
