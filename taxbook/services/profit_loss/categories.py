"""Transaction categories and their display labels.

Category keys come from the upstream classifier (rule-based or AI) and are
stored verbatim on each transaction. The P&L engine only needs two facts about
them: the default key for uncategorised rows, and a human-readable label for
presentation. Labels live in an immutable ``CategoryLabels`` object that
callers inject, so the label set can grow without touching the computation.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

DEFAULT_INCOME_CATEGORY = "other_income"
DEFAULT_EXPENSE_CATEGORY = "miscellaneous"

INCOME_CATEGORIES: tuple[str, ...] = (
    "salary",
    "business_revenue",
    "freelance_income",
    "foreign_income",
    "capital_gains",
    "crypto_sale",
    "other_income",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "rent",
    "utilities",
    "food",
    "transportation",
    "business_expenses",
    "subscriptions",
    "professional_fees",
    "maintenance",
    "health",
    "donations",
    "tax_payments",
    "bank_charges",
    "pension_contributions",
    "nhf_contributions",
    "insurance",
    "transfers",
    "crypto_purchase",
    "personal_expense",
    "miscellaneous",
)

_DEFAULT_LABELS = {
    "salary": "Salary",
    "business_revenue": "Business Revenue",
    "freelance_income": "Freelance Income",
    "foreign_income": "Foreign Income",
    "capital_gains": "Capital Gains",
    "crypto_sale": "Crypto Sales",
    "other_income": "Other Income",
    "rent": "Rent",
    "utilities": "Utilities",
    "food": "Food & Dining",
    "transportation": "Transportation",
    "business_expenses": "Business Expenses",
    "subscriptions": "Subscriptions",
    "professional_fees": "Professional Fees",
    "maintenance": "Maintenance",
    "health": "Health",
    "donations": "Donations",
    "tax_payments": "Tax Payments",
    "bank_charges": "Bank Charges",
    "pension_contributions": "Pension Contributions",
    "nhf_contributions": "NHF Contributions",
    "insurance": "Insurance",
    "transfers": "Transfers",
    "crypto_purchase": "Crypto Purchase",
    "personal_expense": "Personal Expense",
    "miscellaneous": "Miscellaneous",
}


def default_category(is_income: bool) -> str:
    return DEFAULT_INCOME_CATEGORY if is_income else DEFAULT_EXPENSE_CATEGORY


class CategoryLabels(Mapping[str, str]):
    """Read-only category key -> label lookup.

    ``label()`` never fails: keys outside the table are returned unchanged so
    newly introduced categories still render.
    """

    __slots__ = ("_labels",)

    def __init__(self, labels: Mapping[str, str] | None = None):
        self._labels = MappingProxyType(dict(labels or {}))

    def label(self, key: str) -> str:
        return self._labels.get(key, key)

    def extended(self, extra: Mapping[str, str]) -> CategoryLabels:
        """Return a new lookup with ``extra`` layered over these labels."""
        merged = dict(self._labels)
        merged.update(extra)
        return CategoryLabels(merged)

    def __getitem__(self, key: str) -> str:
        return self._labels[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"CategoryLabels({len(self._labels)} labels)"


DEFAULT_CATEGORY_LABELS = CategoryLabels(_DEFAULT_LABELS)
