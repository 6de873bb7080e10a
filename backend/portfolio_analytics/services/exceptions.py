# backend/portfolio_analytics/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
knowledge. Callers (an HTTP layer, a report job) are responsible for mapping
them to responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidIntervalError
    ├── NotFoundError
    │   └── PortfolioNotFoundError
    └── AnalyticsError
        ├── InsufficientCashFlowError
        ├── XIRRNonConvergenceError
        ├── NoPriceAvailableError
        ├── BenchmarkUnavailableError
        └── EmptyLedgerError
"""

from datetime import date


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (invalid parameters, bad
    window sizes, etc.), NOT for raw row validation which is handled
    by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidIntervalError(ValidationError):
    """
    Raised when an invalid interval is specified for time series.

    Valid intervals are: daily, weekly, monthly
    """

    def __init__(self, interval: str) -> None:
        self.interval = interval
        super().__init__(
            f"Invalid interval: '{interval}'. Valid options: daily, weekly, monthly",
            field="interval"
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Portfolio")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class PortfolioNotFoundError(NotFoundError):
    """
    Raised when the data source knows nothing about a portfolio.

    Attributes:
        portfolio_id: ID of the portfolio that was not found
    """

    def __init__(self, portfolio_id: int | str) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(
            f"Portfolio {portfolio_id} not found",
            resource_type="Portfolio",
            resource_id=portfolio_id,
        )


# =============================================================================
# ANALYTICS ERRORS
# =============================================================================


class AnalyticsError(ServiceError):
    """
    Base exception for analytics calculation errors.
    """
    pass


class InsufficientCashFlowError(AnalyticsError):
    """
    Raised when XIRR is requested for cash flows that cannot have a root.

    XIRR needs at least two flows, with at least one outflow (negative)
    and one inflow (positive).

    Attributes:
        flow_count: Number of flows supplied
    """

    def __init__(self, flow_count: int, message: str | None = None) -> None:
        self.flow_count = flow_count
        msg = message or (
            f"XIRR requires at least 2 cash flows with both outflows and "
            f"inflows (got {flow_count})"
        )
        super().__init__(msg)


class XIRRNonConvergenceError(AnalyticsError):
    """
    Raised when neither Newton-Raphson nor bisection finds a rate.

    This happens when NPV has no sign change inside the supported rate
    range (-99% to +1000%).

    Attributes:
        last_rate: Last rate tried by Newton-Raphson (if any)
    """

    def __init__(self, last_rate: float | None = None, message: str | None = None) -> None:
        self.last_rate = last_rate
        msg = message or "XIRR did not converge within the supported rate range"
        super().__init__(msg)


class NoPriceAvailableError(AnalyticsError):
    """
    Raised when no price exists at or before the requested date.

    Attributes:
        holding_id: Holding (or benchmark index) without a price
        as_of: The date for which a price was requested
    """

    def __init__(self, holding_id: str, as_of: date) -> None:
        self.holding_id = holding_id
        self.as_of = as_of
        super().__init__(f"No price available for '{holding_id}' on or before {as_of}")


class BenchmarkUnavailableError(AnalyticsError):
    """
    Raised when a benchmark comparison cannot be performed.

    This typically means:
    - The portfolio's category has no mapped benchmark index
    - The benchmark has no price history
    - The benchmark has no price at a cash flow date or the end date

    Attributes:
        index_id: The benchmark index (None when no index could be chosen)
        reason: Short description of what is missing
    """

    def __init__(self, index_id: str | None, reason: str) -> None:
        self.index_id = index_id
        self.reason = reason
        label = f"Benchmark '{index_id}'" if index_id else "Benchmark"
        super().__init__(f"{label} unavailable: {reason}")


class EmptyLedgerError(AnalyticsError):
    """
    Raised when a holding (or a whole portfolio) has no transactions.

    Attributes:
        holding_id: The empty holding, or None for the whole portfolio
    """

    def __init__(self, holding_id: str | None = None, portfolio_id: int | str | None = None) -> None:
        self.holding_id = holding_id
        self.portfolio_id = portfolio_id
        if holding_id is not None:
            msg = f"Holding '{holding_id}' has no transactions"
        elif portfolio_id is not None:
            msg = f"Portfolio {portfolio_id} has no transactions"
        else:
            msg = "Ledger has no transactions"
        super().__init__(msg)


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidIntervalError",
    # Not Found
    "NotFoundError",
    "PortfolioNotFoundError",
    # Analytics
    "AnalyticsError",
    "InsufficientCashFlowError",
    "XIRRNonConvergenceError",
    "NoPriceAvailableError",
    "BenchmarkUnavailableError",
    "EmptyLedgerError",
]
