from __future__ import annotations

from fastapi import APIRouter

from taxbook.core.config import settings
from taxbook.services.profit_loss import DEFAULT_TAX_CONFIGURATION, compute_progressive_tax

router = APIRouter(tags=["health"])


@router.get("/live")
async def live() -> dict[str, str]:
    """Kubernetes-style liveness endpoint (no dependencies)."""
    return {"status": "alive"}


@router.get("/healthz")
async def healthz() -> dict[str, object]:
    """Readiness probe: the engine can compute with its default schedule."""
    engine_ok = compute_progressive_tax(0, DEFAULT_TAX_CONFIGURATION).estimated_tax == 0
    return {"status": "ok" if engine_ok else "degraded", "env": settings.ENV, "engine": engine_ok}
