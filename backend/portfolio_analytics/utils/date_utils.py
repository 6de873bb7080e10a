# backend/portfolio_analytics/utils/date_utils.py
"""
Date utility functions for the analytics engine.

This module provides shared calendar arithmetic used across the valuation
and analytics packages:
- Month arithmetic with end-of-month clamping (rolling look-back windows)
- Year fractions for XIRR discounting
- Resampling boundaries for growth curves (daily, weekly, monthly)

Usage:
    from portfolio_analytics.utils.date_utils import add_months, generate_dates

    anchor = add_months(date(2024, 3, 31), -1)  # date(2024, 2, 29)
"""

import calendar
from datetime import date, timedelta

from portfolio_analytics.services.constants import DAYS_PER_YEAR
from portfolio_analytics.services.exceptions import InvalidIntervalError

VALID_INTERVALS = ("daily", "weekly", "monthly")


def month_end(d: date) -> date:
    """Return the last calendar day of d's month."""
    last_day = calendar.monthrange(d.year, d.month)[1]
    return date(d.year, d.month, last_day)


def add_months(d: date, months: int) -> date:
    """
    Shift a date by a whole number of months (negative to go back).

    The day is clamped to the length of the target month, so month-end
    dates stay on month ends where the target month is shorter.

    Example:
        >>> add_months(date(2024, 3, 31), -1)
        date(2024, 2, 29)
    """
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def year_fraction(start: date, end: date) -> float:
    """
    Years between two dates, for XIRR discounting.

    Whole anniversary years count as exactly 1.0 each; the remaining days
    are divided by a 365.25-day year. Flows exactly one calendar year apart
    are therefore discounted over t = 1 regardless of leap days.

    Returns a negative fraction when end is before start.
    """
    if end < start:
        return -year_fraction(end, start)

    years = end.year - start.year
    anniversary = add_months(start, 12 * years)
    if anniversary > end:
        years -= 1
        anniversary = add_months(start, 12 * years)

    remaining_days = (end - anniversary).days
    return years + remaining_days / DAYS_PER_YEAR


def generate_dates(start_date: date, end_date: date, interval: str) -> list[date]:
    """
    Generate resampling dates between start_date and end_date.

    The first element is always start_date and the last is always end_date;
    in between are the interval boundaries (every day, every Friday, or
    every month end) that fall strictly inside the range.

    Args:
        start_date: First date (inclusive)
        end_date: Last date (inclusive)
        interval: "daily", "weekly", or "monthly"

    Returns:
        Sorted list of unique dates

    Raises:
        InvalidIntervalError: If interval is not recognised
    """
    if interval not in VALID_INTERVALS:
        raise InvalidIntervalError(interval)

    if end_date < start_date:
        return []

    if interval == "daily":
        boundaries = _generate_daily(start_date, end_date)
    elif interval == "weekly":
        boundaries = _generate_weekly(start_date, end_date)
    else:
        boundaries = _generate_monthly(start_date, end_date)

    dates = [start_date]
    dates.extend(d for d in boundaries if start_date < d < end_date)
    if end_date != start_date:
        dates.append(end_date)
    return dates


def _generate_daily(start: date, end: date) -> list[date]:
    """Every calendar day in the range."""
    dates = []
    current = start
    while current <= end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def _generate_weekly(start: date, end: date) -> list[date]:
    """Every Friday in the range."""
    days_until_friday = (4 - start.weekday()) % 7
    current = start + timedelta(days=days_until_friday)

    dates = []
    while current <= end:
        dates.append(current)
        current += timedelta(days=7)
    return dates


def _generate_monthly(start: date, end: date) -> list[date]:
    """Every month end in the range."""
    dates = []
    current = month_end(start)
    while current <= end:
        dates.append(current)
        current = month_end(add_months(date(current.year, current.month, 1), 1))
    return dates
