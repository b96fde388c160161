import os
from dataclasses import dataclass, field
from urllib.parse import quote_plus

from dotenv import load_dotenv

DEFAULT_JWT_KEY = "change-me"


def _get_int(value: str | None, default: int | None = None) -> int | None:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./emargement.db"

    user = quote_plus(os.getenv("DB_USER", ""))
    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    database = os.getenv("DB_DATABASE", "")
    return f"mysql+pymysql://{user}:{password}@{host}/{database}"


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    database_url: str = "sqlite:///./emargement.db"
    jwt_key: str = DEFAULT_JWT_KEY
    jwt_algorithm: str = "HS256"
    # None keeps tokens valid until the signing key changes.
    jwt_expires_minutes: int | None = None
    bcrypt_rounds: int = 10
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:4200"])


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        database_url=_database_url(),
        jwt_key=os.getenv("JWT_KEY", DEFAULT_JWT_KEY),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=_get_int(os.getenv("JWT_EXPIRES_MINUTES")),
        bcrypt_rounds=_get_int(os.getenv("BCRYPT_ROUNDS"), default=10),
        cors_origins=_get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:4200"]),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.app_env.lower() == "production" and settings.jwt_key == DEFAULT_JWT_KEY:
        raise RuntimeError("JWT_KEY must be set in production.")
