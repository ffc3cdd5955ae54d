"""Period date range calculation utilities.

Provides functions for turning a P&L period selection (monthly, quarterly,
annual) into an inclusive date window, and for testing transaction dates
against it.
"""
from calendar import monthrange
from datetime import date
from typing import Any, Optional, Tuple

from .records import PeriodKind, coerce_period_kind

DateWindow = Tuple[date, date]


def month_window(year: int, month: int) -> DateWindow:
    """First and last calendar day of a month, inclusive."""
    last_day = monthrange(year, month)[1]
    return (date(year, month, 1), date(year, month, last_day))


def quarter_window(year: int, month: int) -> DateWindow:
    """Window of the calendar quarter containing ``month`` (1-12).

    Quarter index is zero-based: Jan-Mar is 0, Apr-Jun is 1, and so on.
    """
    quarter_index = (month - 1) // 3
    first_month = quarter_index * 3 + 1
    start, _ = month_window(year, first_month)
    _, end = month_window(year, first_month + 2)
    return (start, end)


def window_for(kind: Any, reference_date: Optional[date]) -> Optional[DateWindow]:
    """Calculate the inclusive date window for a period selection.

    Args:
        kind: 'monthly', 'quarterly' or 'annual' (or a PeriodKind)
        reference_date: Date anchoring which month/quarter is selected

    Returns:
        Tuple of (start_date, end_date) inclusive, or None when no date
        filter applies (annual, or no reference date)

    Raises:
        InvalidPeriodError: If kind is not one of the supported periods
    """
    period = coerce_period_kind(kind)
    if period is PeriodKind.ANNUAL or reference_date is None:
        return None
    if period is PeriodKind.MONTHLY:
        return month_window(reference_date.year, reference_date.month)
    return quarter_window(reference_date.year, reference_date.month)


def in_window(tx_date: Optional[date], window: Optional[DateWindow]) -> bool:
    """True when a transaction date falls inside the window.

    No window means no filter. A missing date never matches a real window.
    """
    if window is None:
        return True
    if tx_date is None:
        return False
    start, end = window
    return start <= tx_date <= end
