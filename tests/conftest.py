from __future__ import annotations

import os

# Select TestSettings before any taxbook module builds the settings singleton
os.environ.setdefault("APP_ENV", "test")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taxbook.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)


@pytest.fixture
def tx_factory():
    """Factory for raw transaction rows as the storage service returns them."""
    def _create(amount=10_000, *, is_income=False, **overrides):
        row = {
            "date": "2025-05-15",
            "amount": amount,
            "is_income": is_income,
            "category": "business_revenue" if is_income else "rent",
            "business_flag": "business",
        }
        row.update(overrides)
        return row
    return _create


@pytest.fixture
def may_2025():
    return date(2025, 5, 15)
