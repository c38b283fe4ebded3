import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def load_environment() -> None:
    """
    Load environment variables by profile.
    - development (default): .env
    - production: .env.production
    """
    root_dir = Path(__file__).resolve().parents[1]
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()
    env_filename = ".env.production" if environment == "production" else ".env"
    env_path = root_dir / env_filename

    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
    else:
        load_dotenv(override=False)


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


def _normalize_database_url(url: str) -> str:
    # Hosted Postgres often hands out postgres://, SQLAlchemy expects postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./roombook.db"
    secret_key: str = "CHANGE_THIS_SECRET_IN_REAL_PROJECT"
    access_token_expire_minutes: int = 60
    require_auth: bool = False
    rate_limit: str = "120/minute"
    rate_limit_enabled: bool = True
    upload_dir: str = "uploads"
    seed_demo_data: bool = True
    reject_inverted_ranges: bool = False
    active_window_days: int = 7
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=_normalize_database_url(
                os.getenv("DATABASE_URL", defaults.database_url)
            ),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            require_auth=_str_to_bool(os.getenv("REQUIRE_AUTH"), defaults.require_auth),
            rate_limit=os.getenv("RATE_LIMIT", defaults.rate_limit),
            rate_limit_enabled=_str_to_bool(
                os.getenv("RATE_LIMIT_ENABLED"), defaults.rate_limit_enabled
            ),
            upload_dir=os.getenv("UPLOAD_DIR", defaults.upload_dir),
            seed_demo_data=_str_to_bool(os.getenv("SEED_DEMO_DATA"), defaults.seed_demo_data),
            reject_inverted_ranges=_str_to_bool(
                os.getenv("REJECT_INVERTED_RANGES"), defaults.reject_inverted_ranges
            ),
            active_window_days=int(os.getenv("ACTIVE_WINDOW_DAYS", defaults.active_window_days)),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings, read once from the environment.

    Also used as a FastAPI dependency so tests can swap in their own values
    through ``app.dependency_overrides``.
    """
    load_environment()
    return Settings.from_env()
