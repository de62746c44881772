"""Simple database connectivity check."""
from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import text

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from txseries.core.config import get_settings  # noqa: E402  (import after sys.path manipulation)
from txseries.db.engine import create_sync_engine  # noqa: E402


def main() -> None:
    settings = get_settings()
    engine = create_sync_engine()
    with engine.connect() as conn:
        version = conn.execute(text("SELECT version()")).scalar()
        timescale = conn.execute(
            text("SELECT extversion FROM pg_extension WHERE extname = 'timescaledb'")
        ).scalar()
        count = conn.execute(text("SELECT COUNT(*) FROM transactions")).scalar()
        print(f"Connected to {settings.database.name} ({version})")
        print(f"TimescaleDB: {timescale or 'not installed'}")
        print(f"transactions rows: {count:,}")
        masked_password = "***" if settings.database.password else ""
        print(
            "Connection details: {user}:{pwd}@{host}:{port}/{name}".format(
                user=settings.database.user,
                pwd=masked_password,
                host=settings.database.host,
                port=settings.database.port,
                name=settings.database.name,
            )
        )


if __name__ == "__main__":
    main()
