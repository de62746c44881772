"""Application configuration primitives."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_FALSE_VALUES = {"0", "false", "False", "no"}


@dataclass(slots=True)
class DatabaseSettings:
    """Connection details for the time-series database."""

    driver: str
    host: str
    port: int
    user: str
    password: str
    name: str
    connect_timeout: int = 2
    pool_recycle: int = 30

    @property
    def sqlalchemy_url(self) -> str:
        """Build a SQLAlchemy compatible URL."""

        if self.password:
            credentials = f"{self.user}:{self.password}"
        else:
            credentials = self.user
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.name}"


@dataclass(slots=True)
class ApiSettings:
    """HTTP surface settings."""

    prefix: str = "/api"
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(slots=True)
class RateLimitSettings:
    """Fixed-window request quota applied per client address."""

    enabled: bool = True
    max_requests: int = 100
    window_seconds: int = 15 * 60


@dataclass(slots=True)
class LoggingSettings:
    level: str = "INFO"
    log_dir: Path | None = None


@dataclass(slots=True)
class Settings:
    """Top-level application configuration container."""

    database: DatabaseSettings
    api: ApiSettings
    rate_limit: RateLimitSettings
    logging: LoggingSettings
    sqlalchemy_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        def _get_env(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _parse_origins(value: str) -> tuple[str, ...]:
            origins = tuple(item.strip() for item in value.split(",") if item.strip())
            return origins or ("*",)

        def _normalise_prefix(value: str) -> str:
            value = value.strip().rstrip("/")
            if value and not value.startswith("/"):
                value = f"/{value}"
            return value

        db = DatabaseSettings(
            driver=_get_env("DB_DRIVER", "postgresql+psycopg2"),
            host=_get_env("DB_HOST", "127.0.0.1"),
            port=int(_get_env("DB_PORT", "5432")),
            user=_get_env("DB_USER", "postgres"),
            password=_get_env("DB_PASSWORD", "postgres"),
            name=_get_env("DB_NAME", "transactions"),
            connect_timeout=int(_get_env("DB_CONNECT_TIMEOUT", "2")),
            pool_recycle=int(_get_env("DB_POOL_RECYCLE", "30")),
        )
        api = ApiSettings(
            prefix=_normalise_prefix(_get_env("API_PREFIX", "/api")),
            cors_origins=_parse_origins(_get_env("CORS_ORIGINS", "*")),
        )
        rate_limit = RateLimitSettings(
            enabled=_get_env("RATE_LIMIT_ENABLED", "1") not in _FALSE_VALUES,
            max_requests=int(_get_env("RATE_LIMIT_MAX_REQUESTS", "100")),
            window_seconds=int(_get_env("RATE_LIMIT_WINDOW_SECONDS", "900")),
        )
        log_dir = _get_env("LOG_DIR", "")
        logging_settings = LoggingSettings(
            level=_get_env("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir) if log_dir else None,
        )
        echo_flag = _get_env("SQLALCHEMY_ECHO", "0")
        return cls(
            database=db,
            api=api,
            rate_limit=rate_limit,
            logging=logging_settings,
            sqlalchemy_echo=echo_flag not in _FALSE_VALUES,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "sqlalchemy_echo": settings.sqlalchemy_echo,
            "database": {
                "driver": settings.database.driver,
                "host": settings.database.host,
                "port": settings.database.port,
                "name": settings.database.name,
                "user": settings.database.user,
            },
            "api_prefix": settings.api.prefix,
            "rate_limit": {
                "enabled": settings.rate_limit.enabled,
                "max_requests": settings.rate_limit.max_requests,
                "window_seconds": settings.rate_limit.window_seconds,
            },
        },
    )
    return settings
