# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup for the session layer.

Every record carries two context fields: the request id of the API call in
flight and the employee id of the active session. Both live in ContextVars so
concurrent tasks on one event loop never see each other's values.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<yellow>emp={extra[employee]}</yellow> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_UNSET = "-"
_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default=_UNSET)
_EMPLOYEE: ContextVar[str] = ContextVar("employee", default=_UNSET)

_QUIET_LIBRARIES = ("httpx", "httpcore")


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).bind(**_context()).log(
            level, record.getMessage()
        )


def _context() -> dict[str, str]:
    return {"correlation_id": _CORRELATION_ID.get(), "employee": _EMPLOYEE.get()}


class ContextualLogger:
    """Loguru proxy that binds the current request id and employee on every call."""

    def __getattr__(self, name):  # pragma: no cover
        return getattr(_logger.bind(**_context()), name)


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or _UNSET)


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set(_UNSET)


def has_correlation_id() -> bool:
    return _CORRELATION_ID.get() != _UNSET


@contextmanager
def correlation_scope(value: str) -> Iterator[str]:
    token = _CORRELATION_ID.set(value)
    try:
        yield value
    finally:
        _CORRELATION_ID.reset(token)


def bind_employee(external_id: str | None) -> None:
    _EMPLOYEE.set(external_id or _UNSET)


def setup_logging(level: str | None = None, *, log_file: str | None = None) -> None:
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_file = log_file or os.getenv("LOG_FILE")

    _logger.remove()
    _logger.configure(extra={"correlation_id": _UNSET, "employee": _UNSET})
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=True,
        backtrace=False,
        diagnose=False,
    )

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(
            log_file,
            level=level,
            format=_FMT,
            filter=sanitize_record,
            colorize=False,
            rotation="10 MB",
            retention=5,
            enqueue=True,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "bind_employee",
    "clear_correlation_id",
    "correlation_scope",
    "get_correlation_id",
    "has_correlation_id",
    "logger",
    "new_request_id",
    "set_correlation_id",
    "setup_logging",
]
