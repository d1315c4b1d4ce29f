"""
Process logging: one stdout handler whose records carry the request's
correlation id and the signed-in user id.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(user_id)s | %(message)s"

# Libraries that log every statement or request at INFO.
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "multipart", "passlib")


class RequestContextFilter(logging.Filter):
    """Copy the context variables onto each record; "-" when unset."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


@contextmanager
def request_context(correlation_id: str) -> Iterator[None]:
    """
    Bind a correlation id for the duration of one request.

    The user id starts empty; authentication fills it in once the bearer
    token has been resolved.
    """
    cid_token = correlation_id_var.set(correlation_id)
    uid_token = user_id_var.set(None)
    try:
        yield
    finally:
        correlation_id_var.reset(cid_token)
        user_id_var.reset(uid_token)


# PUBLIC_INTERFACE
def configure_logging(level: int | str = logging.INFO) -> None:
    """Replace the root handlers with the context-aware stdout handler."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
