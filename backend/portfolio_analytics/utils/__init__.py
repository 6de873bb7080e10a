# backend/portfolio_analytics/utils/__init__.py
"""
Utility modules for the analytics engine.

This package contains cross-cutting utilities:
- logging: Logging configuration and setup with correlation ID support
- context: Request context management for correlation IDs
- date_utils: Calendar arithmetic (month shifts, year fractions, resampling)

Usage:
    from portfolio_analytics.utils import setup_logging
    from portfolio_analytics.utils import get_correlation_id, set_correlation_id
    from portfolio_analytics.utils.date_utils import add_months
"""

from portfolio_analytics.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    get_request_context,
    set_request_context,
    clear_request_context,
    request_scope,
)
from portfolio_analytics.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "get_request_context",
    "set_request_context",
    "clear_request_context",
    "request_scope",
]
