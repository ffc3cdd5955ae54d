import pytest
from fastapi.testclient import TestClient

from taxbook.api.main import app
from taxbook.core.config import settings


def _report(client: TestClient, **payload):
    return client.post("/profit-loss/report", json=payload)


def test_monthly_report_end_to_end(client, tx_factory):
    transactions = [
        tx_factory(2_000_000, is_income=True),
        tx_factory(200_000),
        tx_factory(50_000, category="food", business_flag="personal"),
        tx_factory(100_000, category="utilities", business_flag="mixed", deductible_percentage=40),
        tx_factory(999_999, is_income=True, date="2025-07-01"),
    ]
    resp = _report(
        client,
        transactions=transactions,
        period={"kind": "monthly", "reference_date": "2025-05-15"},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert data["period"] == "monthly"
    assert data["period_start"] == "2025-05-01"
    assert data["period_end"] == "2025-05-31"
    assert data["total_business_income"] == 2_000_000
    assert data["total_business_expenses"] == 240_000
    assert data["net_profit"] == 1_760_000
    assert data["is_loss"] is False
    assert data["transaction_count"] == 3
    assert data["has_data"] is True
    # Largest expense first, with display labels
    assert [row["category"] for row in data["expense_by_category"]] == ["rent", "utilities"]
    assert data["expense_by_category"][1]["label"] == "Utilities"
    assert data["expense_by_category"][1]["amount"] == 40_000
    assert len(data["monthly_chart"]) == 12
    assert data["monthly_chart"][6] == {"month": "Jul", "income": 999_999, "expenses": 0, "profit": 999_999}


def test_report_tax_breakdown_with_settings_rows(client, tx_factory):
    resp = _report(
        client,
        transactions=[tx_factory(1_800_000, is_income=True)],
        tax_settings={"exemption_threshold": 800_000},
        tax_brackets=[
            {"min_amount": 0, "max_amount": 300000, "rate": 7},
            {"min_amount": 300000, "max_amount": 600000, "rate": 11},
            {"min_amount": 600000, "max_amount": -1, "rate": 15},
        ],
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert data["taxable_income"] == 1_000_000
    assert data["estimated_tax"] == 114_000
    assert data["net_profit_after_tax"] == 1_686_000
    assert [s["bracket"] for s in data["tax_breakdown"]] == [
        "₦0 - ₦300,000",
        "₦300,000 - ₦600,000",
        "Above ₦600,000",
    ]
    assert [s["rate_percent"] for s in data["tax_breakdown"]] == [7, 11, 15]


def test_empty_report_has_no_data(client):
    resp = _report(client, transactions=[], period={"kind": "quarterly", "reference_date": "2025-05-15"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["has_data"] is False
    assert data["period_start"] == "2025-04-01"
    assert data["period_end"] == "2025-06-30"
    assert data["net_profit"] == 0
    assert data["estimated_tax"] == 0
    assert data["income_by_category"] == []


def test_report_inclusion_policy_override(client, tx_factory):
    transactions = [tx_factory(10_000, is_income=True, business_flag=None)]

    opt_out = _report(client, transactions=transactions).json()
    opt_in = _report(client, transactions=transactions, inclusion_policy="business_only").json()

    assert opt_out["total_business_income"] == 10_000
    assert opt_in["total_business_income"] == 0


def test_invalid_inclusion_policy_rejected(client):
    resp = _report(client, transactions=[], inclusion_policy="everything")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "TAX300"


def test_invalid_period_rejected(client):
    resp = _report(client, transactions=[], period={"kind": "weekly", "reference_date": "2025-05-15"})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "TAX301"
    assert error["details"]["kind"] == "weekly"


def test_invalid_bracket_rejected(client, tx_factory):
    resp = _report(
        client,
        transactions=[tx_factory(1_000, is_income=True)],
        tax_brackets=[{"min_amount": 0, "max_amount": -1, "rate": 250}],
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "TAX302"


def test_too_many_transactions_rejected(client, tx_factory, monkeypatch):
    monkeypatch.setattr(settings, "PL_MAX_TRANSACTIONS", 2)
    resp = _report(client, transactions=[tx_factory() for _ in range(3)])
    assert resp.status_code == 413
    error = resp.json()["error"]
    assert error["code"] == "SYS400"
    assert error["details"] == {"received": 3, "limit": 2}


def test_tax_estimate_default_schedule(client):
    resp = client.post("/tax/estimate", json={"net_profit": "1800000"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["exemption_threshold"] == 800_000
    assert data["estimated_tax"] == 114_000
    assert len(data["tax_breakdown"]) == 3


def test_tax_estimate_below_threshold_is_zero(client):
    resp = client.post("/tax/estimate", json={"net_profit": 800_000})
    assert resp.status_code == 200
    data = resp.json()
    assert data["estimated_tax"] == 0
    assert data["effective_tax_rate"] == 0
    assert data["tax_breakdown"] == []


def test_tax_estimate_garbage_threshold_rejected(client):
    resp = client.post("/tax/estimate", json={"net_profit": 1, "tax_settings": {"exemption_threshold": "lots"}})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "TAX300"


def test_categories_listing(client):
    resp = client.get("/profit-loss/categories")
    assert resp.status_code == 200
    data = resp.json()
    assert {"key": "business_revenue", "label": "Business Revenue"} in data["income"]
    assert {"key": "miscellaneous", "label": "Miscellaneous"} in data["expense"]


def test_health_endpoints():
    client = TestClient(app)
    assert client.get("/live").json() == {"status": "alive"}
    health = client.get("/healthz").json()
    assert health["status"] == "ok"
    assert health["env"] == "test"


def test_report_with_very_large_amount(client, tx_factory):
    resp = _report(client, transactions=[tx_factory("1e27", is_income=True)])
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["total_business_income"] == pytest.approx(1e27)
    assert data["estimated_tax"] == pytest.approx(2.4e26)
    assert data["tax_breakdown"][-1]["bracket"] == "Above ₦3,200,000"


def test_tax_estimate_very_large_profit(client):
    resp = client.post("/tax/estimate", json={"net_profit": "1e30"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["estimated_tax"] == pytest.approx(2.4e29)
    assert data["effective_tax_rate"] == 24


def test_tax_estimate_out_of_range_profit_rejected(client):
    resp = client.post("/tax/estimate", json={"net_profit": "1e40"})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "TAX303"
    assert error["details"]["field"] == "net_profit"
