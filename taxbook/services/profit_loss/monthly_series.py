"""Twelve-month P&L series for charting.

Always covers January-December of one calendar year, whatever period the
report itself is filtered to. Uses the full transaction set, subject only to
the business-relevance policy.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from .aggregation import aggregate_by_category
from .classification import (
    DEFAULT_INCLUSION_POLICY,
    InclusionPolicy,
    coerce_inclusion_policy,
    is_business_relevant,
)
from .records import Transaction

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class MonthlyPL:
    month: str
    income: Decimal
    expenses: Decimal
    profit: Decimal


def build_monthly_series(
    transactions: Iterable[Transaction],
    year: int,
    policy: Union[InclusionPolicy, str] = DEFAULT_INCLUSION_POLICY,
) -> tuple[MonthlyPL, ...]:
    """Aggregate relevant transactions into one entry per calendar month of ``year``."""
    policy = coerce_inclusion_policy(policy)
    buckets: dict[int, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.date is None or tx.date.year != year:
            continue
        if not is_business_relevant(tx, policy):
            continue
        buckets[tx.date.month - 1].append(tx)

    series = []
    for month_index, label in enumerate(MONTH_LABELS):
        totals = aggregate_by_category(buckets.get(month_index, ()))
        series.append(
            MonthlyPL(
                month=label,
                income=totals.total_income,
                expenses=totals.total_expenses,
                profit=totals.net,
            )
        )
    return tuple(series)
