# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from leave_ledger.config import get_settings
from leave_ledger.db import SessionDep
from leave_ledger.services.store import SqlBalanceStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded", "error"]
    version: str
    environment: str
    last_accrual_run: date | None = None


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Return service health and the date of the last accrual run.

    A failing database read degrades the status rather than failing the check.
    """
    settings = get_settings()
    status: Literal["ok", "degraded", "error"] = "ok"
    last_accrual_run: date | None = None

    try:
        last_accrual_run = await SqlBalanceStore(session).get_last_run_date()
    except Exception:
        logger.exception("Health check: database connectivity failed")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        last_accrual_run=last_accrual_run,
    )
