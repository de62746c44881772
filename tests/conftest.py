"""Shared fixtures: a file-backed SQLite store seeded with five transactions."""
from __future__ import annotations

import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from tests.factories import SEED_TRANSACTIONS, build_transaction  # noqa: E402
from txseries.core.config import Settings  # noqa: E402
from txseries.dependencies import get_session_factory  # noqa: E402
from txseries.main import create_app  # noqa: E402
from txseries.models import Base  # noqa: E402


@pytest.fixture()
def session_factory(tmp_path) -> sessionmaker:
    """Provide a seeded database; each session gets its own connection."""

    engine = create_engine(f"sqlite:///{tmp_path / 'transactions.db'}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with factory() as session:
        session.add_all([build_transaction(*row) for row in SEED_TRANSACTIONS])
        session.commit()
    yield factory
    engine.dispose()


@pytest.fixture()
def settings() -> Settings:
    settings = Settings.from_env()
    settings.rate_limit.enabled = False
    return settings


@pytest.fixture()
def app(settings: Settings, session_factory: sessionmaker) -> FastAPI:
    application = create_app(settings)
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    return application


@pytest.fixture()
def client(app: FastAPI):
    with TestClient(app) as test_client:
        yield test_client
