# backend/tasktracker/config.py
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DB_URL = "sqlite+aiosqlite:///./tasktracker.db"
DEFAULT_SECRET = "change-me"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and handed to create_app()."""

    database_url: str = DEFAULT_DB_URL
    jwt_secret: str = DEFAULT_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 7
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    db_auto_create: bool = True
    log_level: str = "INFO"
    app_env: str = "development"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("ASYNC_DATABASE_URL") or os.getenv("DATABASE_URL") or DEFAULT_DB_URL,
            jwt_secret=os.getenv("JWT_SECRET", DEFAULT_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_expire_days=int(os.getenv("TOKEN_EXPIRE_DAYS", "7")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origins=_get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["*"]),
            db_auto_create=_get_bool(os.getenv("DB_AUTO_CREATE"), default=True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_env=os.getenv("APP_ENV", "development"),
        )

    def validate(self) -> None:
        if self.app_env.lower() == "production" and self.jwt_secret == DEFAULT_SECRET:
            raise RuntimeError("JWT_SECRET must be set in production.")
