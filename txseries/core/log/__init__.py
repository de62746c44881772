"""Rich console logging, fed through a background queue.

Records are stamped with the request context on the emitting thread, pushed
onto a queue and written by a listener thread to the rich console and,
when ``log_dir`` is set, to a file rotated at midnight.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from threading import RLock

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .context import ContextFilter, log_context
from .timing import timeit

__all__ = ["init_logging", "get_logger", "shutdown_logging", "log_context", "timeit"]

CONSOLE_FORMAT = "%(context)s%(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(context)s%(message)s"


@dataclass(frozen=True)
class LoggingConfig:
    app_name: str = "txseries"
    level: str | int = "INFO"
    log_dir: Path | None = None
    queue: bool = True


@dataclass
class _Runtime:
    config: LoggingConfig
    handlers: list[logging.Handler] = field(default_factory=list)
    attached: list[logging.Handler] = field(default_factory=list)
    listener: QueueListener | None = None


_lock = RLock()
_runtime: _Runtime | None = None
_stamp_context = ContextFilter()


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _console_handler() -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(cfg: LoggingConfig) -> logging.Handler:
    directory = Path(cfg.log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        directory / f"{cfg.app_name}.log",
        when="midnight",
        backupCount=14,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _start(cfg: LoggingConfig) -> _Runtime:
    level = _level_number(cfg.level)
    runtime = _Runtime(config=cfg)
    runtime.handlers.append(_console_handler())
    if cfg.log_dir is not None:
        runtime.handlers.append(_file_handler(cfg))
    for handler in runtime.handlers:
        handler.setLevel(level)
        handler.addFilter(_stamp_context)

    root = logging.getLogger()
    root.setLevel(level)
    if cfg.queue:
        records: SimpleQueue = SimpleQueue()
        entry = QueueHandler(records)
        entry.addFilter(_stamp_context)
        runtime.attached.append(entry)
        runtime.listener = QueueListener(records, *runtime.handlers, respect_handler_level=True)
        runtime.listener.start()
    else:
        runtime.attached.extend(runtime.handlers)
    for handler in runtime.attached:
        root.addHandler(handler)
    return runtime


def _stop(runtime: _Runtime) -> None:
    # Stopping the listener drains the queue before the handlers close.
    if runtime.listener is not None:
        runtime.listener.stop()
    root = logging.getLogger()
    for handler in runtime.attached:
        root.removeHandler(handler)
    for handler in runtime.handlers:
        handler.close()


def init_logging(
    *,
    app_name: str = "txseries",
    level: str | int = "INFO",
    log_dir: str | Path | None = None,
    queue: bool = True,
) -> None:
    """Configure the root logger; calling again with the same options is a no-op."""

    global _runtime
    cfg = LoggingConfig(
        app_name=app_name,
        level=level,
        log_dir=Path(log_dir) if log_dir else None,
        queue=queue,
    )
    with _lock:
        if _runtime is not None:
            if _runtime.config == cfg:
                return
            _stop(_runtime)
        else:
            install_rich_traceback(show_locals=False)
        _runtime = _start(cfg)


def shutdown_logging() -> None:
    """Flush queued records and detach the handlers installed by :func:`init_logging`."""

    global _runtime
    with _lock:
        if _runtime is not None:
            _stop(_runtime)
            _runtime = None


def get_logger(name: str | None = None) -> logging.Logger:
    with _lock:
        if _runtime is None:
            init_logging()
        return logging.getLogger(name or _runtime.config.app_name)
