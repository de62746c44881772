"""Timing helpers to log the duration and row counts of database round trips."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Iterator, Optional


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    count: int = 0
    start: float = field(default_factory=perf_counter)

    def add(self, amount: int = 1) -> None:
        self.count += amount

    @property
    def elapsed_ms(self) -> float:
        return (perf_counter() - self.start) * 1000

    def finish(self, success: bool = True) -> None:
        elapsed = self.elapsed_ms
        if success:
            self.logger.log(
                self.level,
                f"{self.label} completed in {elapsed:.1f}ms ({self.count:,} {self.unit})",
            )
        else:
            self.logger.error(f"{self.label} failed after {elapsed:.1f}ms")


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    unit: str = "rows",
) -> Iterator[_Timer]:
    """Time the wrapped block and log its outcome.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "txseries.timer")
        level: Logging level for the success message
        unit: Unit reported alongside the counter (e.g. "rows", "buckets")
    """
    log = logger or logging.getLogger("txseries.timer")
    timer = _Timer(label=label, logger=log, level=level, unit=unit)
    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
