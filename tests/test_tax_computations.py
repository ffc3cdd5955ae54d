"""Tests for progressive tax computation and configuration loading."""
from decimal import Decimal

import pytest

from taxbook.core.exceptions import InvalidConfigurationError, InvalidTaxBracketError
from taxbook.services.profit_loss import (
    DEFAULT_EXEMPTION_THRESHOLD,
    DEFAULT_TAX_BRACKETS,
    TaxBracket,
    TaxConfiguration,
    brackets_from_rows,
    compute_progressive_tax,
    resolve_tax_configuration,
)

# Fallback rows as the settings service would store them (rate in percent)
DEFAULT_ROWS = [
    {"min_amount": 0, "max_amount": 300000, "rate": 7},
    {"min_amount": 300000, "max_amount": 600000, "rate": 11},
    {"min_amount": 600000, "max_amount": 1100000, "rate": 15},
    {"min_amount": 1100000, "max_amount": 1600000, "rate": 19},
    {"min_amount": 1600000, "max_amount": 3200000, "rate": 21},
    {"min_amount": 3200000, "max_amount": -1, "rate": 24},
]


def test_default_schedule_matches_published_table():
    assert DEFAULT_EXEMPTION_THRESHOLD == Decimal("800000")
    assert [(b.width, b.rate) for b in DEFAULT_TAX_BRACKETS] == [
        (Decimal("300000"), Decimal("0.07")),
        (Decimal("300000"), Decimal("0.11")),
        (Decimal("500000"), Decimal("0.15")),
        (Decimal("500000"), Decimal("0.19")),
        (Decimal("1600000"), Decimal("0.21")),
        (None, Decimal("0.24")),
    ]


def test_profit_of_1_8m_with_default_config():
    result = compute_progressive_tax(Decimal("1800000"))

    assert result.taxable_income == Decimal("1000000")
    assert result.estimated_tax == Decimal("114000")
    assert [s.tax for s in result.breakdown] == [Decimal("21000"), Decimal("33000"), Decimal("60000")]
    assert result.net_profit_after_tax == Decimal("1686000")


def test_profit_at_exemption_threshold_is_untaxed():
    result = compute_progressive_tax(DEFAULT_EXEMPTION_THRESHOLD)

    assert result.taxable_income == Decimal("0")
    assert result.estimated_tax == Decimal("0")
    assert result.breakdown == ()


def test_loss_is_untaxed_and_after_tax_equals_loss():
    result = compute_progressive_tax(Decimal("-250000"))

    assert result.estimated_tax == Decimal("0")
    assert result.effective_rate == Decimal("0")
    assert result.net_profit_after_tax == Decimal("-250000")


def test_top_bracket_absorbs_remainder():
    # 800K exemption + 3.2M through the capped brackets + 1M at 24%
    result = compute_progressive_tax(Decimal("5000000"))

    capped = 21000 + 33000 + 75000 + 95000 + 336000
    assert result.estimated_tax == Decimal(capped + 240000)
    assert result.breakdown[-1].upper is None
    assert result.breakdown[-1].amount == Decimal("1000000")
    assert result.breakdown[-1].label == "Above ₦3,200,000"
    assert result.breakdown[0].label == "₦0 - ₦300,000"


def test_last_bracket_is_open_ended_even_with_a_width():
    config = TaxConfiguration(
        exemption_threshold=Decimal("0"),
        brackets=(TaxBracket(Decimal("100"), Decimal("0.10")), TaxBracket(Decimal("100"), Decimal("0.20"))),
    )

    result = compute_progressive_tax(Decimal("1000"), config)

    assert result.estimated_tax == Decimal("190")


def test_brackets_are_consumed_in_list_order_not_sorted():
    config = TaxConfiguration(
        exemption_threshold=Decimal("0"),
        brackets=(TaxBracket(Decimal("100"), Decimal("0.50")), TaxBracket(None, Decimal("0.10"))),
    )

    assert compute_progressive_tax(Decimal("200"), config).estimated_tax == Decimal("60")


def test_empty_bracket_table_falls_back_to_default_schedule():
    config = TaxConfiguration(exemption_threshold=Decimal("800000"), brackets=())

    assert compute_progressive_tax(Decimal("1800000"), config).estimated_tax == Decimal("114000")


def test_tax_rounds_to_kobo():
    config = TaxConfiguration(exemption_threshold=Decimal("0"), brackets=(TaxBracket(None, Decimal("0.07")),))

    assert compute_progressive_tax(Decimal("0.55"), config).estimated_tax == Decimal("0.04")


def test_tax_is_monotonic_in_profit():
    previous = Decimal("0")
    for profit in range(0, 6_000_001, 125_000):
        tax = compute_progressive_tax(Decimal(profit)).estimated_tax
        assert tax >= previous
        previous = tax


@pytest.mark.parametrize("rate", [Decimal("-0.01"), Decimal("1.5")])
def test_out_of_range_rate_is_rejected(rate):
    with pytest.raises(InvalidTaxBracketError) as exc:
        TaxConfiguration(brackets=(TaxBracket(Decimal("100"), rate), TaxBracket(None, Decimal("0.1"))))

    assert exc.value.code == "TAX302"
    assert exc.value.details["bracket_index"] == 0


def test_open_ended_bracket_must_be_last():
    with pytest.raises(InvalidTaxBracketError):
        TaxConfiguration(brackets=(TaxBracket(None, Decimal("0.1")), TaxBracket(Decimal("5"), Decimal("0.2"))))


def test_negative_width_and_threshold_are_rejected():
    with pytest.raises(InvalidTaxBracketError):
        TaxConfiguration(brackets=(TaxBracket(Decimal("-5"), Decimal("0.1")),))
    with pytest.raises(InvalidConfigurationError):
        TaxConfiguration(exemption_threshold=Decimal("-1"))


def test_non_numeric_rate_is_rejected():
    with pytest.raises(InvalidTaxBracketError):
        TaxBracket(Decimal("100"), "seven")


def test_brackets_from_rows_rebuild_default_table():
    assert brackets_from_rows(reversed(DEFAULT_ROWS)) == DEFAULT_TAX_BRACKETS


@pytest.mark.parametrize(
    "row",
    [
        {"min_amount": "x", "max_amount": 10, "rate": 5},
        {"min_amount": 100, "max_amount": 10, "rate": 5},
        {"min_amount": 0, "max_amount": 10, "rate": 150},
        {"min_amount": 0, "max_amount": 10, "rate": -1},
        {"min_amount": 0, "max_amount": "ten", "rate": 5},
    ],
)
def test_brackets_from_rows_rejects_bad_rows(row):
    with pytest.raises(InvalidTaxBracketError):
        brackets_from_rows([row])


def test_resolve_tax_configuration_defaults():
    config = resolve_tax_configuration(None, None)

    assert config.exemption_threshold == Decimal("800000")
    assert config.brackets == DEFAULT_TAX_BRACKETS


def test_resolve_tax_configuration_uses_settings_threshold_and_rows():
    config = resolve_tax_configuration(
        {"exemption_threshold": "1000000"},
        [{"min_amount": 0, "max_amount": -1, "rate": 10}],
    )

    result = compute_progressive_tax(Decimal("1500000"), config)

    assert config.exemption_threshold == Decimal("1000000")
    assert result.estimated_tax == Decimal("50000")


def test_resolve_tax_configuration_keeps_zero_threshold():
    config = resolve_tax_configuration({"exemption_threshold": 0}, DEFAULT_ROWS)

    assert config.exemption_threshold == Decimal("0")


def test_resolve_tax_configuration_rejects_garbage_threshold():
    with pytest.raises(InvalidConfigurationError):
        resolve_tax_configuration({"exemption_threshold": "lots"}, None)


def test_profit_beyond_default_precision_is_taxed_exactly():
    result = compute_progressive_tax(Decimal(10**30))

    # 560,000 through the capped brackets, 24% of the rest
    assert result.estimated_tax == Decimal("23" + "9" * 22 + "600000")
    assert result.estimated_tax.as_tuple().exponent == -2
    assert result.net_profit_after_tax == Decimal(76 * 10**28 + 400_000)
    assert result.effective_rate == Decimal("24.00")


def test_out_of_range_profit_input_is_treated_as_zero():
    assert compute_progressive_tax("1e40").estimated_tax == Decimal("0")
