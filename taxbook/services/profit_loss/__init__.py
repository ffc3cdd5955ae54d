"""Profit & Loss / Tax Computation Module.

Pure computation over an in-memory transaction list: no database access, no
I/O, no shared mutable state.

Sub-modules:
- records: Transaction / PeriodSelection value types and raw-row normalisation
- categories: Category defaults and the injectable label lookup
- classification: Business-relevance policy and effective amount resolution
- period_utils: Date windows for monthly / quarterly / annual periods
- aggregation: Per-category income and expense sums
- computations: Progressive tax brackets, defaults and configuration loading
- monthly_series: Twelve-month chart series
- reporting_service: PLReport assembly and ProfitLossReportService
"""
from .aggregation import CategoryTotals, aggregate_by_category
from .categories import (
    DEFAULT_CATEGORY_LABELS,
    DEFAULT_EXPENSE_CATEGORY,
    DEFAULT_INCOME_CATEGORY,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    CategoryLabels,
)
from .classification import (
    DEFAULT_INCLUSION_POLICY,
    InclusionPolicy,
    coerce_inclusion_policy,
    effective_amount,
    is_business_relevant,
)
from .computations import (
    DEFAULT_EXEMPTION_THRESHOLD,
    DEFAULT_TAX_BRACKETS,
    DEFAULT_TAX_CONFIGURATION,
    BracketSlice,
    TaxBracket,
    TaxComputation,
    TaxConfiguration,
    brackets_from_rows,
    compute_progressive_tax,
    resolve_tax_configuration,
)
from .monthly_series import MONTH_LABELS, MonthlyPL, build_monthly_series
from .period_utils import in_window, month_window, quarter_window, window_for
from .records import (
    BusinessFlag,
    PeriodKind,
    PeriodSelection,
    Transaction,
    normalise_transactions,
    parse_transaction_date,
    to_decimal,
)
from .reporting_service import PLReport, ProfitLossReportService, build_pl_report

__all__ = [
    # Value types
    "Transaction",
    "BusinessFlag",
    "PeriodKind",
    "PeriodSelection",
    "TaxBracket",
    "TaxConfiguration",
    "TaxComputation",
    "BracketSlice",
    "CategoryTotals",
    "MonthlyPL",
    "PLReport",
    "CategoryLabels",
    "InclusionPolicy",
    # Constants
    "DEFAULT_EXEMPTION_THRESHOLD",
    "DEFAULT_TAX_BRACKETS",
    "DEFAULT_TAX_CONFIGURATION",
    "DEFAULT_CATEGORY_LABELS",
    "DEFAULT_INCOME_CATEGORY",
    "DEFAULT_EXPENSE_CATEGORY",
    "DEFAULT_INCLUSION_POLICY",
    "INCOME_CATEGORIES",
    "EXPENSE_CATEGORIES",
    "MONTH_LABELS",
    # Computation functions
    "effective_amount",
    "is_business_relevant",
    "coerce_inclusion_policy",
    "aggregate_by_category",
    "compute_progressive_tax",
    "build_monthly_series",
    "build_pl_report",
    # Utilities
    "window_for",
    "month_window",
    "quarter_window",
    "in_window",
    "to_decimal",
    "parse_transaction_date",
    "normalise_transactions",
    "brackets_from_rows",
    "resolve_tax_configuration",
    # Service class
    "ProfitLossReportService",
]
