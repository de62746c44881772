"""Session factories bound to the configured engine."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from .engine import create_sync_engine


def get_sessionmaker(url: str | None = None, **engine_options) -> sessionmaker:
    """Bind a factory to a new engine; the API caches one per process."""

    engine = create_sync_engine(url, **engine_options)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Iterator[Session]:
    """Yield a session inside a transaction committed on a clean exit.

    Without ``factory`` a throwaway engine is created and disposed afterwards,
    which suits one-shot scripts.
    """

    owned = factory is None
    factory = factory or get_sessionmaker()
    try:
        with factory.begin() as session:
            yield session
    finally:
        if owned:
            factory.kw["bind"].dispose()
