"""Category aggregation for P&L.

Folds a (filtered, windowed) transaction list into per-category sums split by
income and expense. Decimal addition is exact, so totals do not depend on the
order transactions arrive in.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from .classification import ZERO, effective_amount
from .records import Transaction, money_context


@dataclass(frozen=True)
class CategoryTotals:
    income_by_category: Mapping[str, Decimal]
    expense_by_category: Mapping[str, Decimal]
    total_income: Decimal
    total_expenses: Decimal
    transaction_count: int

    @property
    def net(self) -> Decimal:
        with money_context():
            return self.total_income - self.total_expenses


def aggregate_by_category(transactions: Iterable[Transaction]) -> CategoryTotals:
    """Sum effective amounts per category, split by income vs. expense."""
    income: dict[str, Decimal] = {}
    expenses: dict[str, Decimal] = {}
    count = 0
    with money_context():
        for tx in transactions:
            bucket = income if tx.is_income else expenses
            bucket[tx.category] = bucket.get(tx.category, ZERO) + effective_amount(tx)
            count += 1
        total_income = sum(income.values(), ZERO)
        total_expenses = sum(expenses.values(), ZERO)

    return CategoryTotals(
        income_by_category=MappingProxyType(income),
        expense_by_category=MappingProxyType(expenses),
        total_income=total_income,
        total_expenses=total_expenses,
        transaction_count=count,
    )
