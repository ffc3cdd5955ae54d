"""Per-transaction classification: business relevance and effective amount.

Pure helpers with no database access, used by both the windowed aggregation
and the monthly series so the two views always agree.
"""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from taxbook.core.exceptions import InvalidConfigurationError

from .records import BusinessFlag, Transaction, money_context

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class InclusionPolicy(str, Enum):
    """Which transactions count toward business P&L.

    EXCLUDE_PERSONAL (opt-out): everything except rows flagged personal.
        Unflagged rows count, since most users never flag manually.
    BUSINESS_ONLY (opt-in): only rows flagged business or mixed.
    """
    EXCLUDE_PERSONAL = "exclude_personal"
    BUSINESS_ONLY = "business_only"

    # Aliases matching how the two policies are usually described
    OPT_OUT = "exclude_personal"
    OPT_IN = "business_only"


DEFAULT_INCLUSION_POLICY = InclusionPolicy.EXCLUDE_PERSONAL


def coerce_inclusion_policy(policy: Any) -> InclusionPolicy:
    """Map a caller-supplied policy (enum member or name) onto InclusionPolicy.

    Raises:
        InvalidConfigurationError: For anything that is not a known policy
    """
    if isinstance(policy, InclusionPolicy):
        return policy
    if isinstance(policy, str):
        try:
            return InclusionPolicy(policy.strip().lower())
        except ValueError:
            pass
    raise InvalidConfigurationError(
        message=(
            f"Invalid inclusion policy '{policy}'. "
            "Must be exclude_personal or business_only."
        ),
        details={"inclusion_policy": policy if isinstance(policy, str) else repr(policy)},
    )


def is_business_relevant(
    tx: Transaction,
    policy: Any = DEFAULT_INCLUSION_POLICY,
) -> bool:
    """Decide whether a transaction counts toward business income/expenses."""
    if coerce_inclusion_policy(policy) is InclusionPolicy.BUSINESS_ONLY:
        return tx.business_flag in (BusinessFlag.BUSINESS, BusinessFlag.MIXED)
    return tx.business_flag is not BusinessFlag.PERSONAL


def _deductible_fraction(tx: Transaction) -> Decimal:
    pct = tx.deductible_percentage
    if pct is None:
        return Decimal("1")
    pct = min(max(pct, ZERO), HUNDRED)
    return pct / HUNDRED


def effective_amount(tx: Transaction) -> Decimal:
    """Monetary contribution of one transaction to P&L.

    Base is the naira value when present, else the raw amount, else 0.
    Mixed-use expenses only contribute their deductible percentage
    (default 100). Result is always within [0, |base|].
    """
    base = tx.naira_value if tx.naira_value is not None else tx.amount
    if base is None:
        return ZERO
    base = abs(base)
    if tx.business_flag is BusinessFlag.MIXED and not tx.is_income:
        with money_context():
            return base * _deductible_fraction(tx)
    return base
