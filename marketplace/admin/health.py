"""Liveness report for the bid service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

from ..validation.validator import get_schema_registry

router = APIRouter(prefix="/admin", tags=["admin"])


def _uptime_seconds(started: datetime | None) -> int:
    if started is None:
        return 0
    return int((datetime.now(timezone.utc) - started).total_seconds())


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    state = request.app.state
    return {
        "status": "healthy",
        "version": request.app.version,
        "uptime_seconds": _uptime_seconds(getattr(state, "start_time", None)),
        "storage_backend": state.server_config.storage.backend,
        "request_schemas": get_schema_registry().names(),
    }
