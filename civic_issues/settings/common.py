# Standard library imports
from pathlib import Path
import secrets
from typing import Annotated, Any, Literal

# Third-party imports
from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR: Path = Path(__file__).resolve().parent.parent


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class CommonSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General settings
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ENVIRONMENT: Literal["dev", "staging", "production"] = "dev"
    DEBUG_MODE: bool = False
    PROJECT_NAME: str = "Civic Issues"
    # Overrides the DEBUG_MODE driven default (DEBUG or INFO)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None

    # Database settings
    # DATABASE_URL wins over the POSTGRES_* parts; with neither set a local SQLite file is used
    DATABASE_URL: str | None = None
    POSTGRES_SERVER: str | None = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_DB: str | None = None
    SQL_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.POSTGRES_SERVER:
            return str(
                MultiHostUrl.build(
                    scheme="postgresql+asyncpg",  # async driver for async queries
                    username=self.POSTGRES_USER,
                    password=self.POSTGRES_PASSWORD,
                    host=self.POSTGRES_SERVER,
                    port=self.POSTGRES_PORT,
                    path=self.POSTGRES_DB,
                )
            )
        return f"sqlite+aiosqlite:///{BASE_DIR.parent / 'civic_issues.db'}"

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = [
        AnyUrl("http://localhost:3000/"),
        AnyUrl("http://localhost:5173/"),
        AnyUrl("http://localhost:8000/"),
    ]

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Optional settings
    SENTRY_DSN: str | None = None

    # JWT settings
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30  # anonymous sessions live 30 days

    # Real-time change feed; in-process when REDIS_URL is unset
    REDIS_URL: str | None = None
    CHANGE_FEED_CHANNEL: str = "civic-issues:changes"

    # Issue workflow
    STATUS_TRANSITIONS: Literal["permissive", "forward_only"] = "permissive"
    PLACEHOLDER_IMAGE_URL: str = "https://placehold.co/600x400/cyan/black?text=Issue+Image"

    # Weather provider settings
    WEATHER_API_KEY: str | None = None
    WEATHER_API_URL: str = "https://api.weatherapi.com/v1/current.json"
    WEATHER_TIMEOUT_SECONDS: float = 10.0

    # Fallback location when the client cannot share one (New Delhi)
    DEFAULT_LATITUDE: float = 28.6139
    DEFAULT_LONGITUDE: float = 77.2090
