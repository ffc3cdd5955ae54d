"""Metrics facade.

Route code should ONLY call the semantic helpers here so we can change backend
freely. The P&L engine itself never touches metrics; it stays free of shared
state.

Metrics:
- pl_reports_generated_total        P&L reports served, by period kind
- pl_report_transactions            Transactions received per report request
- tax_estimates_total               Standalone tax estimates served
- invalid_configuration_total       Requests rejected for bad period/bracket config
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_PL_REPORTS = Counter("pl_reports_generated_total", "P&L reports generated", ["period"])
_PL_REPORT_TRANSACTIONS = Histogram(
    "pl_report_transactions",
    "Transactions received per P&L report request",
    buckets=(0, 10, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 25000, 50000),
)
_TAX_ESTIMATES = Counter("tax_estimates_total", "Standalone tax estimates served")
_INVALID_CONFIGURATION = Counter(
    "invalid_configuration_total", "Requests rejected for invalid tax/period configuration", ["code"]
)


def pl_report_generated(period: str, transaction_count: int):
    """Record a served P&L report."""
    _PL_REPORTS.labels(period=period).inc()
    _PL_REPORT_TRANSACTIONS.observe(transaction_count)
    logger.debug("metric pl_reports_generated_total[period=%s] += 1", period)


def tax_estimate_record():
    _TAX_ESTIMATES.inc()


def invalid_configuration(code: str):
    """Record a request rejected with an InvalidConfigurationError."""
    _INVALID_CONFIGURATION.labels(code=code).inc()


__all__ = [
    "pl_report_generated",
    "tax_estimate_record",
    "invalid_configuration",
]
