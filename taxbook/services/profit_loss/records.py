"""Engine-side value types for the P&L engine.

Raw transaction rows arrive from the storage service as loosely-typed
mappings (JSON from the API, rows from the database). ``Transaction.from_record``
normalises one row into an immutable value, parsing its date and numbers
exactly once so later passes (windowing, the twelve monthly buckets) only
compare ready-made ``date`` and ``Decimal`` objects.

Normalisation never raises for bad data: non-numeric amounts become absent,
unparsable dates become ``None``, unknown business flags count as unset.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Optional

from taxbook.core.exceptions import InvalidPeriodError, InvalidReferenceDateError

from .categories import default_category

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "t"})


class BusinessFlag(str, Enum):
    """How a transaction relates to the user's business."""
    BUSINESS = "business"
    MIXED = "mixed"          # Partly business; expense is deductible by percentage
    PERSONAL = "personal"


class PeriodKind(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


# Amounts at or beyond 10**36 are not treated as money
MAX_AMOUNT_DIGITS = 36

# Wide enough that sums of in-range amounts stay exact to the kobo
_MONEY_CONTEXT = Context(prec=96, rounding=ROUND_HALF_EVEN)


def money_context():
    """Decimal context for P&L arithmetic (sums, deductible shares, tax walk)."""
    return localcontext(_MONEY_CONTEXT)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a raw numeric field to Decimal, or None if it is not a usable number.

    Booleans, NaN, infinities and magnitudes of 10**36 or more are treated as
    missing rather than numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    if result and result.adjusted() >= MAX_AMOUNT_DIGITS:
        logger.warning("Ignoring out-of-range amount with %d digits", result.adjusted() + 1)
        return None
    return result


def parse_transaction_date(value: Any) -> Optional[date]:
    """Parse a stored transaction date; None when absent or unparsable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        logger.debug("Unparsable transaction date %r; excluded from dated views", value)
        return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _to_business_flag(value: Any) -> Optional[BusinessFlag]:
    if isinstance(value, BusinessFlag):
        return value
    if not isinstance(value, str):
        return None
    try:
        return BusinessFlag(value.strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class Transaction:
    """One normalised financial transaction (read-only to the engine)."""

    date: Optional[date]
    is_income: bool
    category: str
    amount: Optional[Decimal] = None
    naira_value: Optional[Decimal] = None
    business_flag: Optional[BusinessFlag] = None
    deductible_percentage: Optional[Decimal] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Transaction:
        """Build a Transaction from a raw storage row, defaulting bad fields."""
        is_income = _to_bool(record.get("is_income", False))
        category = record.get("category")
        if not isinstance(category, str) or not category.strip():
            category = default_category(is_income)
        return cls(
            date=parse_transaction_date(record.get("date")),
            is_income=is_income,
            category=category.strip(),
            amount=to_decimal(record.get("amount")),
            naira_value=to_decimal(record.get("naira_value")),
            business_flag=_to_business_flag(record.get("business_flag")),
            deductible_percentage=to_decimal(record.get("deductible_percentage")),
        )


def normalise_transactions(rows) -> tuple[Transaction, ...]:
    """Accept raw mappings and/or Transactions; return Transactions.

    Rows that are neither are skipped.
    """
    result = []
    for position, row in enumerate(rows):
        if isinstance(row, Transaction):
            result.append(row)
        elif isinstance(row, Mapping):
            result.append(Transaction.from_record(row))
        else:
            logger.debug("Skipping transaction row %d of type %s", position, type(row).__name__)
    return tuple(result)


@dataclass(frozen=True, slots=True)
class PeriodSelection:
    """Which slice of time a report covers.

    ``reference_date`` (a date, datetime or ISO string) anchors the
    month/quarter; without it monthly and quarterly selections apply no
    date filter.
    """

    kind: PeriodKind = PeriodKind.ANNUAL
    reference_date: Optional[date] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", coerce_period_kind(self.kind))
        reference = self.reference_date
        if reference is None or (isinstance(reference, date) and not isinstance(reference, datetime)):
            return
        parsed = parse_transaction_date(reference)
        if parsed is None:
            raise InvalidReferenceDateError(reference)
        object.__setattr__(self, "reference_date", parsed)


def coerce_period_kind(kind: Any) -> PeriodKind:
    """Map a caller-supplied period kind onto PeriodKind or fail fast."""
    if isinstance(kind, PeriodKind):
        return kind
    if isinstance(kind, str):
        try:
            return PeriodKind(kind.strip().lower())
        except ValueError:
            pass
    raise InvalidPeriodError(kind)
