"""Liveness check."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from txseries.schemas.transactions import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health() -> HealthStatus:
    return HealthStatus(status="ok", timestamp=datetime.now(timezone.utc))
