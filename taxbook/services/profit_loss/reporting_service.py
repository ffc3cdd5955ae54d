"""P&L Report Service.

Assembles the profit & loss view the dashboard, charts and exports consume:
filter -> window -> aggregate -> net profit -> tax -> monthly series.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from .aggregation import aggregate_by_category
from .categories import DEFAULT_CATEGORY_LABELS, CategoryLabels
from .classification import (
    DEFAULT_INCLUSION_POLICY,
    ZERO,
    InclusionPolicy,
    coerce_inclusion_policy,
    is_business_relevant,
)
from .computations import BracketSlice, TaxConfiguration, compute_progressive_tax
from .monthly_series import MonthlyPL, build_monthly_series
from .period_utils import in_window, window_for
from .records import PeriodKind, PeriodSelection, Transaction, normalise_transactions

logger = logging.getLogger(__name__)

TransactionInput = Union[Transaction, Mapping[str, Any]]


@dataclass(frozen=True)
class PLReport:
    """Immutable result of one P&L computation."""

    period: PeriodKind
    period_start: Optional[date]
    period_end: Optional[date]
    income_by_category: Mapping[str, Decimal]
    expense_by_category: Mapping[str, Decimal]
    total_business_income: Decimal
    total_business_expenses: Decimal
    net_profit: Decimal
    is_loss: bool
    taxable_income: Decimal
    estimated_tax: Decimal
    effective_tax_rate: Decimal
    net_profit_after_tax: Decimal
    tax_breakdown: tuple[BracketSlice, ...]
    monthly_series: tuple[MonthlyPL, ...]
    transaction_count: int
    has_data: bool


def build_pl_report(
    transactions: Iterable[TransactionInput],
    selection: Optional[PeriodSelection] = None,
    tax_config: Optional[TaxConfiguration] = None,
    *,
    policy: Union[InclusionPolicy, str] = DEFAULT_INCLUSION_POLICY,
    today: Optional[date] = None,
) -> PLReport:
    """
    Compute the P&L report for a transaction list and period selection.

    Args:
        transactions: Raw storage rows and/or normalised Transactions
        selection: Period kind and reference date (default: annual, no filter)
        tax_config: Exemption + bracket table (default schedule when None)
        policy: Which transactions count as business
        today: Used for the monthly series year when no reference date is set

    Returns:
        PLReport with category maps, totals, tax estimate and monthly series

    Raises:
        InvalidConfigurationError: Unknown period kind or inclusion policy, or an
            invalid bracket table
    """
    policy = coerce_inclusion_policy(policy)
    selection = selection or PeriodSelection()
    window = window_for(selection.kind, selection.reference_date)
    txs = normalise_transactions(transactions)

    relevant = [tx for tx in txs if is_business_relevant(tx, policy)]
    windowed = [tx for tx in relevant if in_window(tx.date, window)]

    totals = aggregate_by_category(windowed)
    net_profit = totals.net
    tax = compute_progressive_tax(net_profit, tax_config)

    series_year = (selection.reference_date or today or date.today()).year
    monthly = build_monthly_series(relevant, series_year, policy)

    logger.info(
        "P&L computed (%s, window=%s): %d/%d transactions, income=%s, expenses=%s, "
        "profit=%s, tax=%s",
        selection.kind.value,
        f"{window[0]}..{window[1]}" if window else "all",
        len(windowed),
        len(txs),
        totals.total_income,
        totals.total_expenses,
        net_profit,
        tax.estimated_tax,
    )

    return PLReport(
        period=selection.kind,
        period_start=window[0] if window else None,
        period_end=window[1] if window else None,
        income_by_category=totals.income_by_category,
        expense_by_category=totals.expense_by_category,
        total_business_income=totals.total_income,
        total_business_expenses=totals.total_expenses,
        net_profit=net_profit,
        is_loss=net_profit < ZERO,
        taxable_income=tax.taxable_income,
        estimated_tax=tax.estimated_tax,
        effective_tax_rate=tax.effective_rate,
        net_profit_after_tax=tax.net_profit_after_tax,
        tax_breakdown=tax.breakdown,
        monthly_series=monthly,
        transaction_count=totals.transaction_count,
        has_data=totals.transaction_count > 0,
    )


class ProfitLossReportService:
    """Service for P&L reports with injected policy, labels and tax defaults.

    Holds only immutable configuration, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        policy: Union[InclusionPolicy, str] = DEFAULT_INCLUSION_POLICY,
        labels: CategoryLabels = DEFAULT_CATEGORY_LABELS,
        default_tax_config: Optional[TaxConfiguration] = None,
    ):
        self.policy = coerce_inclusion_policy(policy)
        self.labels = labels
        self.default_tax_config = default_tax_config

    def generate_report(
        self,
        transactions: Iterable[TransactionInput],
        selection: Optional[PeriodSelection] = None,
        tax_config: Optional[TaxConfiguration] = None,
        policy: Union[InclusionPolicy, str, None] = None,
        today: Optional[date] = None,
    ) -> PLReport:
        """Generate a report; per-call arguments override the service defaults."""
        return build_pl_report(
            transactions,
            selection,
            tax_config or self.default_tax_config,
            policy=self.policy if policy is None else policy,
            today=today,
        )

    def labelled(self, by_category: Mapping[str, Decimal]) -> list[dict[str, Any]]:
        """Category map as display rows, largest amount first."""
        rows = [
            {"category": key, "label": self.labels.label(key), "amount": amount}
            for key, amount in by_category.items()
        ]
        rows.sort(key=lambda row: (-row["amount"], row["category"]))
        return rows
