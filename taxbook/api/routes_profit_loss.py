"""
Profit & Loss Routes.

Stateless endpoints over the P&L engine: callers send the transactions they
already fetched from storage together with the active tax settings.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from taxbook.core.config import settings
from taxbook.core.exceptions import AmountOutOfRangeError, PayloadTooLargeError
from taxbook.metrics import pl_report_generated, tax_estimate_record
from taxbook.models.pl_schemas import (
    CategoryListOut,
    CategoryOut,
    PLReportOut,
    PLReportRequest,
    TaxEstimateOut,
    TaxEstimateRequest,
)
from taxbook.services.profit_loss import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    PeriodSelection,
    ProfitLossReportService,
    compute_progressive_tax,
    resolve_tax_configuration,
    to_decimal,
)

logger = logging.getLogger(__name__)
router = APIRouter()

_service = ProfitLossReportService(policy=settings.PL_INCLUSION_POLICY)


@router.post("/profit-loss/report", response_model=PLReportOut)
def generate_pl_report(body: PLReportRequest) -> PLReportOut:
    """Compute the business P&L and tax estimate for the selected period."""
    received = len(body.transactions)
    if received > settings.PL_MAX_TRANSACTIONS:
        raise PayloadTooLargeError(received, settings.PL_MAX_TRANSACTIONS)

    selection = PeriodSelection(kind=body.period.kind, reference_date=body.period.reference_date)
    tax_config = resolve_tax_configuration(
        body.tax_settings.model_dump() if body.tax_settings else None,
        body.tax_brackets,
    )
    report = _service.generate_report(
        body.transactions,
        selection,
        tax_config,
        policy=body.inclusion_policy,
    )
    pl_report_generated(report.period.value, received)
    return PLReportOut.from_report(report, _service)


@router.post("/tax/estimate", response_model=TaxEstimateOut)
def estimate_tax(body: TaxEstimateRequest) -> TaxEstimateOut:
    """Estimate tax for a given net profit under the supplied (or default) schedule."""
    tax_config = resolve_tax_configuration(
        body.tax_settings.model_dump() if body.tax_settings else None,
        body.tax_brackets,
    )
    net_profit = to_decimal(body.net_profit)
    if net_profit is None:
        raise AmountOutOfRangeError("net_profit", body.net_profit)
    result = compute_progressive_tax(net_profit, tax_config)
    tax_estimate_record()
    return TaxEstimateOut.from_computation(result)


@router.get("/profit-loss/categories", response_model=CategoryListOut)
def list_categories() -> CategoryListOut:
    """Known transaction categories with display labels."""
    labels = _service.labels
    return CategoryListOut(
        income=[CategoryOut(key=key, label=labels.label(key)) for key in INCOME_CATEGORIES],
        expense=[CategoryOut(key=key, label=labels.label(key)) for key in EXPENSE_CATEGORIES],
    )
