import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


def _build_database_url() -> str:
    raw_url = os.getenv("DATABASE_URL") or os.getenv("CHATTERBOX_POSTGRES_URL", "")
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+psycopg://", 1)
    return raw_url


@dataclass(frozen=True)
class Settings:
    database_url: str = field(default_factory=_build_database_url)
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_issuer: str = os.getenv("JWT_ISSUER", "chatterbox-app")
    session_ttl_days: int = int(os.getenv("SESSION_TTL_DAYS", "30"))
    login_code_ttl_minutes: int = int(os.getenv("LOGIN_CODE_TTL_MINUTES", "10"))
    login_rate_limit_seconds: int = int(os.getenv("LOGIN_RATE_LIMIT_SECONDS", "60"))
    lockout_window_minutes: int = int(os.getenv("LOCKOUT_WINDOW_MINUTES", "60"))
    lockout_threshold: int = int(os.getenv("LOCKOUT_THRESHOLD", "10"))
    login_code_debug: bool = _env_bool("LOGIN_CODE_DEBUG", False)
    resend_api_key: str = os.getenv("RESEND_API_KEY", "")
    email_from: str = os.getenv("EMAIL_FROM", "clue@glovee.io")
    login_email_subject: str = os.getenv(
        "LOGIN_EMAIL_SUBJECT", "Your Chatterbox login code"
    )
    auth_rate_limit_max: int = int(os.getenv("AUTH_RATE_LIMIT_MAX", "50"))
    auth_rate_limit_window_seconds: int = int(
        os.getenv("AUTH_RATE_LIMIT_WINDOW_SECONDS", "300")
    )
    prompts_rate_limit_max: int = int(os.getenv("PROMPTS_RATE_LIMIT_MAX", "30"))
    prompts_rate_limit_window_seconds: int = int(
        os.getenv("PROMPTS_RATE_LIMIT_WINDOW_SECONDS", "60")
    )
    api_rate_limit_max: int = int(os.getenv("API_RATE_LIMIT_MAX", "100"))
    api_rate_limit_window_seconds: int = int(
        os.getenv("API_RATE_LIMIT_WINDOW_SECONDS", "900")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ORIGINS")
    )


settings = Settings()
