"""
Pydantic schemas for the P&L and tax estimate API.

Transactions are accepted as loose JSON objects: the engine defaults malformed
fields instead of rejecting them, so request validation must not be stricter
than the engine.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from taxbook.services.profit_loss import (
    BracketSlice,
    MonthlyPL,
    PLReport,
    ProfitLossReportService,
    TaxComputation,
)


class TaxSettingsIn(BaseModel):
    """Active tax settings row from the settings service."""
    exemption_threshold: Any = Field(None, description="Exemption threshold in Naira")


class PeriodIn(BaseModel):
    kind: str = Field("annual", description="monthly, quarterly or annual")
    reference_date: date | None = Field(None, description="Date anchoring the month/quarter")


class PLReportRequest(BaseModel):
    """Request body for P&L report generation."""
    transactions: list[dict[str, Any]] = Field(
        default_factory=list,
        description=(
            "Transaction rows: date, amount, naira_value, is_income, category, "
            "business_flag, deductible_percentage"
        ),
    )
    period: PeriodIn = Field(default_factory=PeriodIn)
    tax_settings: TaxSettingsIn | None = None
    tax_brackets: list[dict[str, Any]] | None = Field(
        None, description="Bracket rows: min_amount, max_amount (-1 = no limit), rate (percent)"
    )
    inclusion_policy: str | None = Field(
        None, description="exclude_personal or business_only; defaults to server setting"
    )


class TaxEstimateRequest(BaseModel):
    net_profit: Decimal = Field(..., description="Business income minus business expenses")
    tax_settings: TaxSettingsIn | None = None
    tax_brackets: list[dict[str, Any]] | None = None


class CategoryAmountOut(BaseModel):
    category: str
    label: str
    amount: float


class BracketSliceOut(BaseModel):
    bracket: str
    rate_percent: float
    amount: float
    tax: float

    @classmethod
    def from_slice(cls, item: BracketSlice) -> BracketSliceOut:
        return cls(
            bracket=item.label,
            rate_percent=float(item.rate * 100),
            amount=float(item.amount),
            tax=float(item.tax),
        )


class MonthlyPLOut(BaseModel):
    month: str
    income: float
    expenses: float
    profit: float

    @classmethod
    def from_entry(cls, entry: MonthlyPL) -> MonthlyPLOut:
        return cls(
            month=entry.month,
            income=float(entry.income),
            expenses=float(entry.expenses),
            profit=float(entry.profit),
        )


class PLReportOut(BaseModel):
    """P&L report response."""
    period: str
    period_start: str | None
    period_end: str | None
    income_by_category: list[CategoryAmountOut]
    expense_by_category: list[CategoryAmountOut]
    total_business_income: float
    total_business_expenses: float
    net_profit: float
    is_loss: bool
    taxable_income: float
    estimated_tax: float
    effective_tax_rate: float
    net_profit_after_tax: float
    tax_breakdown: list[BracketSliceOut]
    monthly_chart: list[MonthlyPLOut]
    transaction_count: int
    has_data: bool

    @classmethod
    def from_report(cls, report: PLReport, service: ProfitLossReportService) -> PLReportOut:
        def _rows(by_category):
            return [
                CategoryAmountOut(category=row["category"], label=row["label"], amount=float(row["amount"]))
                for row in service.labelled(by_category)
            ]

        return cls(
            period=report.period.value,
            period_start=report.period_start.isoformat() if report.period_start else None,
            period_end=report.period_end.isoformat() if report.period_end else None,
            income_by_category=_rows(report.income_by_category),
            expense_by_category=_rows(report.expense_by_category),
            total_business_income=float(report.total_business_income),
            total_business_expenses=float(report.total_business_expenses),
            net_profit=float(report.net_profit),
            is_loss=report.is_loss,
            taxable_income=float(report.taxable_income),
            estimated_tax=float(report.estimated_tax),
            effective_tax_rate=float(report.effective_tax_rate),
            net_profit_after_tax=float(report.net_profit_after_tax),
            tax_breakdown=[BracketSliceOut.from_slice(s) for s in report.tax_breakdown],
            monthly_chart=[MonthlyPLOut.from_entry(m) for m in report.monthly_series],
            transaction_count=report.transaction_count,
            has_data=report.has_data,
        )


class TaxEstimateOut(BaseModel):
    net_profit: float
    exemption_threshold: float
    taxable_income: float
    estimated_tax: float
    effective_tax_rate: float
    net_profit_after_tax: float
    tax_breakdown: list[BracketSliceOut]

    @classmethod
    def from_computation(cls, result: TaxComputation) -> TaxEstimateOut:
        return cls(
            net_profit=float(result.net_profit),
            exemption_threshold=float(result.exemption_threshold),
            taxable_income=float(result.taxable_income),
            estimated_tax=float(result.estimated_tax),
            effective_tax_rate=float(result.effective_rate),
            net_profit_after_tax=float(result.net_profit_after_tax),
            tax_breakdown=[BracketSliceOut.from_slice(s) for s in result.breakdown],
        )


class CategoryOut(BaseModel):
    key: str
    label: str


class CategoryListOut(BaseModel):
    income: list[CategoryOut]
    expense: list[CategoryOut]
