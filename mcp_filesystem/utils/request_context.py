"""
Request context management using ContextVars.

Tracks the id of the HTTP request or tool call being served so that every
log record emitted while handling it can be correlated.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id",
    default=None,
)


def get_request_id() -> Optional[str]:
    """Get current request ID from context."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set request ID in context."""
    request_id_var.set(request_id)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid.uuid4())


def clear_request_id() -> None:
    """Clear request ID from context."""
    request_id_var.set(None)


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """
    Bind a request ID for the duration of a block.

    An ID already bound by an outer scope (e.g. the HTTP middleware) is
    reused; otherwise a fresh one is generated. The previous value is
    restored on exit.
    """
    current = get_request_id()
    scoped_id = request_id or current or generate_request_id()
    token = request_id_var.set(scoped_id)
    try:
        yield scoped_id
    finally:
        request_id_var.reset(token)
