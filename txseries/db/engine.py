"""Database engine factories."""
from __future__ import annotations

from sqlalchemy import create_engine, make_url
from sqlalchemy.engine import Engine

from txseries.core.config import get_settings
from txseries.core.logger import get_logger

LOGGER = get_logger(__name__)


def create_sync_engine(url: str | None = None, **kwargs) -> Engine:
    """Create a synchronous SQLAlchemy engine using configured defaults.

    The engine owns the connection pool shared by every request; PostgreSQL
    drivers additionally get the configured connect timeout.
    """

    settings = get_settings()
    resolved_url = url or settings.database.sqlalchemy_url

    options = dict(kwargs)
    options.setdefault("echo", settings.sqlalchemy_echo)
    if resolved_url.startswith("postgresql"):
        options.setdefault("pool_pre_ping", True)
        options.setdefault("pool_recycle", settings.database.pool_recycle)
        connect_args = dict(options.pop("connect_args", {}))
        connect_args.setdefault("connect_timeout", settings.database.connect_timeout)
        options["connect_args"] = connect_args

    masked_url = make_url(resolved_url).render_as_string(hide_password=True)
    LOGGER.debug("Creating SQLAlchemy engine", extra={"url": masked_url, "options": options})
    return create_engine(resolved_url, **options)
