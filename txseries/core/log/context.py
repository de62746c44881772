"""Per-request fields rendered in front of every log line."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Mapping

_fields: ContextVar[Mapping[str, object]] = ContextVar("txseries_log_fields", default={})


def render_fields(fields: Mapping[str, object]) -> str:
    """``{"request_id": "ab", "method": "GET"}`` -> ``"request_id=ab method=GET "``."""

    if not fields:
        return ""
    return " ".join(f"{key}={value}" for key, value in fields.items()) + " "


class LogContext:
    """Fields bound here show up on records logged by the same task."""

    def bind(self, **values: object) -> Token:
        merged = {**_fields.get(), **{k: v for k, v in values.items() if v is not None}}
        return _fields.set(merged)

    def reset(self, token: Token) -> None:
        _fields.reset(token)

    @contextmanager
    def scope(self, **values: object) -> Iterator[None]:
        token = self.bind(**values)
        try:
            yield
        finally:
            self.reset(token)

    def current(self) -> dict[str, object]:
        return dict(_fields.get())


class ContextFilter(logging.Filter):
    """Stamp ``record.context`` once, on the thread that emitted the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        # The queue listener thread must not overwrite the caller's fields.
        if not hasattr(record, "context"):
            record.context = render_fields(_fields.get())
        return True


log_context = LogContext()
