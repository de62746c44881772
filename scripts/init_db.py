#!/usr/bin/env python3
"""Create the transactions hypertable and optionally load demo rows."""
from __future__ import annotations

import argparse
import logging
import hashlib
import random
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import insert, text  # noqa: E402

from txseries.core.logger import get_logger, init_logging, log_context, timeit  # noqa: E402
from txseries.db.engine import create_sync_engine  # noqa: E402
from txseries.db.session import session_scope  # noqa: E402
from txseries.models import Base, Transaction  # noqa: E402

logger = get_logger(__name__)

BATCH_SIZE = 1_000
BTC_USD = Decimal("64000")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--demo-rows", type=int, default=0, help="Number of synthetic transactions to insert")
    parser.add_argument("--days", type=int, default=30, help="How many days of history the demo rows span")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument(
        "--skip-hypertable",
        action="store_true",
        help="Only create the plain table (for databases without TimescaleDB)",
    )
    return parser.parse_args()


def create_schema(*, hypertable: bool) -> None:
    engine = create_sync_engine()
    with engine.begin() as connection:
        if hypertable:
            connection.execute(text("CREATE EXTENSION IF NOT EXISTS timescaledb"))
        Base.metadata.create_all(connection)
        if hypertable:
            connection.execute(
                text(
                    "SELECT create_hypertable('transactions', by_range('time'), "
                    "if_not_exists => TRUE)"
                )
            )
    logger.info("Schema ready (hypertable=%s)", hypertable)


def demo_transactions(count: int, *, days: int, now: datetime) -> Iterator[dict]:
    span_seconds = days * 24 * 3600
    first_block = 840_000
    for index in range(count):
        offset = random.randint(0, span_seconds)
        timestamp = now - timedelta(seconds=offset)
        output_total = Decimal(random.lognormvariate(-1.5, 1.8)).quantize(Decimal("0.00000001"))
        yield {
            "hash": hashlib.sha256(f"demo-{index}-{offset}".encode()).hexdigest(),
            "time": timestamp,
            "block_id": first_block + (span_seconds - offset) // 600,
            "output_total": output_total,
            "output_total_usd": (output_total * BTC_USD).quantize(Decimal("0.0001")),
            "fee": Decimal(random.randint(500, 60_000)) / Decimal(100_000_000),
            "size": random.randint(190, 2_500),
        }


def load_demo_rows(count: int, *, days: int) -> None:
    now = datetime.now(timezone.utc)
    batch: list[dict] = []
    with timeit("demo transaction load", logger=logger, level=logging.INFO) as timer, session_scope() as session:
        for row in demo_transactions(count, days=days, now=now):
            batch.append(row)
            if len(batch) >= BATCH_SIZE:
                session.execute(insert(Transaction), batch)
                timer.add(len(batch))
                batch = []
        if batch:
            session.execute(insert(Transaction), batch)
            timer.add(len(batch))


def main() -> None:
    args = parse_args()
    random.seed(args.seed)
    create_schema(hypertable=not args.skip_hypertable)
    if args.demo_rows > 0:
        load_demo_rows(args.demo_rows, days=args.days)


if __name__ == "__main__":
    init_logging(app_name="init-db")
    log_context.bind(job="init_db")
    main()
