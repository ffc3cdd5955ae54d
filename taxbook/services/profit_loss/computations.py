"""Progressive tax computation and its configuration.

Pure computation logic, no database access. Bracket tables and the exemption
threshold are configuration supplied by the settings service; the constants
below are only the fallback used when no usable configuration is supplied.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from taxbook.core.exceptions import InvalidConfigurationError, InvalidTaxBracketError
from taxbook.utils.currency import format_naira

from .classification import HUNDRED, ZERO
from .records import money_context, to_decimal

logger = logging.getLogger(__name__)

KOBO = Decimal("0.01")
ONE = Decimal("1")


@dataclass(frozen=True)
class TaxBracket:
    """One income slice taxed at ``rate``.

    ``width`` is the size of the slice; ``None`` marks the open-ended bracket
    that absorbs all remaining taxable income. ``rate`` is a fraction (0.07).
    """

    width: Optional[Decimal]
    rate: Decimal

    def __post_init__(self):
        rate = to_decimal(self.rate)
        if rate is None:
            raise InvalidTaxBracketError("rate must be a number", rate=repr(self.rate))
        object.__setattr__(self, "rate", rate)
        if self.width is not None:
            width = to_decimal(self.width)
            if width is None:
                raise InvalidTaxBracketError("width must be a number", width=repr(self.width))
            object.__setattr__(self, "width", width)

    @property
    def is_open_ended(self) -> bool:
        return self.width is None


# Fallback schedule applied to taxable income (profit above the exemption)
DEFAULT_EXEMPTION_THRESHOLD = Decimal("800000")
DEFAULT_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("300000"), Decimal("0.07")),    # First ₦300K: 7%
    TaxBracket(Decimal("300000"), Decimal("0.11")),    # Next ₦300K: 11%
    TaxBracket(Decimal("500000"), Decimal("0.15")),    # Next ₦500K: 15%
    TaxBracket(Decimal("500000"), Decimal("0.19")),    # Next ₦500K: 19%
    TaxBracket(Decimal("1600000"), Decimal("0.21")),   # Next ₦1.6M: 21%
    TaxBracket(None, Decimal("0.24")),                 # Remainder: 24%
)


@dataclass(frozen=True)
class TaxConfiguration:
    """Exemption threshold plus an ordered bracket table.

    Brackets are consumed strictly in list order; they are never sorted. The
    last bracket is always treated as open-ended. An empty table means "use
    the default schedule" with this configuration's exemption threshold.
    """

    exemption_threshold: Decimal = DEFAULT_EXEMPTION_THRESHOLD
    brackets: tuple[TaxBracket, ...] = field(default=DEFAULT_TAX_BRACKETS)

    def __post_init__(self):
        threshold = to_decimal(self.exemption_threshold)
        if threshold is None or threshold < ZERO:
            raise InvalidConfigurationError(
                message="Exemption threshold must be a non-negative amount",
                details={"exemption_threshold": str(self.exemption_threshold)},
            )
        object.__setattr__(self, "exemption_threshold", threshold)
        brackets = tuple(self.brackets or ())
        object.__setattr__(self, "brackets", brackets)
        validate_brackets(brackets)


def validate_brackets(brackets: tuple[TaxBracket, ...]) -> None:
    """Reject tables that would produce a nonsensical tax figure."""
    last = len(brackets) - 1
    for index, bracket in enumerate(brackets):
        if bracket.rate < ZERO or bracket.rate > ONE:
            raise InvalidTaxBracketError(
                "rate must be a fraction between 0 and 1",
                index=index,
                rate=str(bracket.rate),
            )
        if bracket.width is not None and bracket.width < ZERO:
            raise InvalidTaxBracketError(
                "width cannot be negative", index=index, width=str(bracket.width)
            )
        if bracket.width is None and index != last:
            raise InvalidTaxBracketError(
                "only the final bracket may be open-ended", index=index
            )


DEFAULT_TAX_CONFIGURATION = TaxConfiguration()


@dataclass(frozen=True)
class BracketSlice:
    """Portion of taxable income taxed within one bracket."""

    lower: Decimal
    upper: Optional[Decimal]  # None for the open-ended bracket
    rate: Decimal
    amount: Decimal
    tax: Decimal

    @property
    def label(self) -> str:
        if self.upper is None:
            return f"Above {format_naira(self.lower, decimals=False)}"
        return f"{format_naira(self.lower, decimals=False)} - {format_naira(self.upper, decimals=False)}"


@dataclass(frozen=True)
class TaxComputation:
    net_profit: Decimal
    exemption_threshold: Decimal
    taxable_income: Decimal
    estimated_tax: Decimal
    effective_rate: Decimal  # Percent of net profit
    breakdown: tuple[BracketSlice, ...] = ()

    @property
    def net_profit_after_tax(self) -> Decimal:
        # Tax comes off the pre-exemption profit, not off taxable income
        with money_context():
            return self.net_profit - self.estimated_tax


def compute_progressive_tax(
    net_profit: Any,
    config: Optional[TaxConfiguration] = None,
) -> TaxComputation:
    """
    Estimate tax on business profit using an exemption and progressive brackets.

    Steps:
    1. Taxable income = max(0, net profit - exemption threshold)
    2. Walk brackets in list order, taxing min(remaining, width) at each rate
    3. Last (or open-ended) bracket absorbs whatever remains
    4. Clamp tax at zero and round to kobo

    Args:
        net_profit: Business income minus business expenses (may be negative)
        config: Tax configuration; None uses the default schedule

    Returns:
        TaxComputation with taxable_income, estimated_tax, effective_rate and
        the per-bracket breakdown
    """
    if isinstance(net_profit, Decimal) and net_profit.is_finite():
        # Aggregated profit may legitimately exceed the per-amount cap
        profit = net_profit
    else:
        profit = to_decimal(net_profit) or ZERO
    if config is None:
        config = DEFAULT_TAX_CONFIGURATION
    brackets = config.brackets
    if not brackets:
        logger.debug("Empty bracket table supplied; using default schedule")
        brackets = DEFAULT_TAX_BRACKETS

    with money_context():
        taxable_income = max(ZERO, profit - config.exemption_threshold)
        remaining = taxable_income
        tax = ZERO
        lower = ZERO
        breakdown: list[BracketSlice] = []
        last = len(brackets) - 1

        for index, bracket in enumerate(brackets):
            if remaining <= ZERO:
                break
            open_ended = bracket.is_open_ended or index == last
            portion = remaining if open_ended else min(remaining, bracket.width)
            bracket_tax = portion * bracket.rate
            tax += bracket_tax
            remaining -= portion

            upper = None if open_ended else lower + bracket.width
            if portion > ZERO:
                breakdown.append(
                    BracketSlice(
                        lower=lower,
                        upper=upper,
                        rate=bracket.rate,
                        amount=portion,
                        tax=bracket_tax.quantize(KOBO, rounding=ROUND_HALF_UP),
                    )
                )
            if upper is not None:
                lower = upper

        estimated_tax = max(ZERO, tax).quantize(KOBO, rounding=ROUND_HALF_UP)
        if profit > ZERO:
            effective_rate = (estimated_tax / profit * HUNDRED).quantize(KOBO, rounding=ROUND_HALF_UP)
        else:
            effective_rate = ZERO

    return TaxComputation(
        net_profit=profit,
        exemption_threshold=config.exemption_threshold,
        taxable_income=taxable_income,
        estimated_tax=estimated_tax,
        effective_rate=effective_rate,
        breakdown=tuple(breakdown),
    )


def brackets_from_rows(rows: Iterable[Mapping[str, Any]]) -> tuple[TaxBracket, ...]:
    """
    Convert settings-service bracket rows into an ordered bracket table.

    Rows carry absolute bounds (``min_amount``/``max_amount`` in taxable
    income) and a percentage ``rate`` (7 for 7%). ``max_amount`` of -1 or
    null marks the open-ended top bracket. Because bounds are absolute, rows
    are ordered by ``min_amount``; the resulting table is then consumed in
    that order.

    Raises:
        InvalidTaxBracketError: For non-numeric bounds, inverted bounds, or a
            rate outside 0-100
    """
    parsed: list[tuple[Decimal, Optional[Decimal], Decimal]] = []
    for position, row in enumerate(rows):
        min_amount = to_decimal(row.get("min_amount"))
        if min_amount is None or min_amount < ZERO:
            raise InvalidTaxBracketError(
                "min_amount must be a non-negative number",
                index=position,
                min_amount=repr(row.get("min_amount")),
            )
        raw_max = row.get("max_amount")
        max_amount = to_decimal(raw_max)
        if raw_max is not None and max_amount is None:
            raise InvalidTaxBracketError(
                "max_amount must be a number", index=position, max_amount=repr(raw_max)
            )
        if max_amount is not None and max_amount == Decimal("-1"):
            max_amount = None
        if max_amount is not None and max_amount < min_amount:
            raise InvalidTaxBracketError(
                "max_amount is below min_amount",
                index=position,
                min_amount=str(min_amount),
                max_amount=str(max_amount),
            )
        rate_pct = to_decimal(row.get("rate"))
        if rate_pct is None or rate_pct < ZERO or rate_pct > HUNDRED:
            raise InvalidTaxBracketError(
                "rate must be a percentage between 0 and 100",
                index=position,
                rate=repr(row.get("rate")),
            )
        parsed.append((min_amount, max_amount, rate_pct))

    parsed.sort(key=lambda item: item[0])

    brackets: list[TaxBracket] = []
    expected_min = ZERO
    for min_amount, max_amount, rate_pct in parsed:
        if min_amount != expected_min:
            logger.warning(
                "Tax bracket rows are not contiguous: expected a bracket from %s, got %s",
                expected_min,
                min_amount,
            )
        width = None if max_amount is None else max_amount - min_amount
        brackets.append(TaxBracket(width=width, rate=rate_pct / HUNDRED))
        if max_amount is not None:
            expected_min = max_amount
    return tuple(brackets)


def resolve_tax_configuration(
    tax_settings: Optional[Mapping[str, Any]] = None,
    bracket_rows: Optional[Iterable[Mapping[str, Any]]] = None,
) -> TaxConfiguration:
    """
    Build the active TaxConfiguration from settings-service payloads.

    Missing settings fall back to the ₦800,000 exemption; missing or empty
    bracket rows fall back to the default schedule.
    """
    exemption = None
    if tax_settings:
        exemption = to_decimal(tax_settings.get("exemption_threshold"))
        if exemption is None and tax_settings.get("exemption_threshold") is not None:
            raise InvalidConfigurationError(
                message="Exemption threshold must be a non-negative amount",
                details={"exemption_threshold": repr(tax_settings.get("exemption_threshold"))},
            )
    if exemption is None:
        exemption = DEFAULT_EXEMPTION_THRESHOLD

    brackets = brackets_from_rows(bracket_rows or ())
    if not brackets:
        logger.info("No tax brackets configured; using default schedule")
        brackets = DEFAULT_TAX_BRACKETS

    return TaxConfiguration(exemption_threshold=exemption, brackets=brackets)
