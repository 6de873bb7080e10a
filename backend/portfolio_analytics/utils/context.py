# backend/portfolio_analytics/utils/context.py
"""
Request context management for the analytics engine.

The engine itself is I/O free, but callers (HTTP layer, report generator,
dashboard jobs) run it per request. This module stores request-scoped data
so every log line emitted while computing analytics can be traced back:
- Correlation ID for request tracing
- Free-form request metadata (e.g. portfolio_id)
- request_scope(): set both for the duration of one request

Uses Python's contextvars, which are isolated per thread and per asyncio
task, so concurrent analytics requests never see each other's context.

Usage:
    from portfolio_analytics.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    correlation_id = get_correlation_id()  # Returns "abc-123"
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_request_context_var: ContextVar[dict[str, Any] | None] = ContextVar("request_context", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """
    Get the current request's correlation ID.

    Returns:
        The correlation ID for the current request, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current request.

    Args:
        correlation_id: Unique identifier for this request
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)


# =============================================================================
# EXTENDED CONTEXT
# =============================================================================

def get_request_context() -> dict[str, Any]:
    """
    Get a copy of the request context dictionary.

    Returns:
        Dictionary containing all request context data.
    """
    return dict(_request_context_var.get() or {})


def set_request_context(key: str, value: Any) -> None:
    """
    Set a value in the request context.

    Args:
        key: Context key
        value: Context value
    """
    ctx = get_request_context()
    ctx[key] = value
    _request_context_var.set(ctx)


def clear_request_context() -> None:
    """Clear all request context."""
    _request_context_var.set(None)


# =============================================================================
# REQUEST SCOPE
# =============================================================================

@contextmanager
def request_scope(**values: Any) -> Iterator[str]:
    """
    Scope one analytics request.

    Keeps the caller's correlation ID, or generates a UUID when none is
    set, and merges values into the request context. Both are restored
    to their previous state on exit.

    Usage:
        with request_scope(portfolio_id=1) as correlation_id:
            ...

    Yields:
        The correlation ID in effect inside the scope
    """
    correlation_id = get_correlation_id() or str(uuid.uuid4())
    id_token = _correlation_id_var.set(correlation_id)
    ctx_token = _request_context_var.set({**get_request_context(), **values})
    try:
        yield correlation_id
    finally:
        _request_context_var.reset(ctx_token)
        _correlation_id_var.reset(id_token)
