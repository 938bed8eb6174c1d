# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class AccrualRunResponse(BaseModel):
    """Response from the accrual trigger endpoint."""

    today: date
    already_ran: bool
    processed: int
    initialized: int
    recomputed: int
    unchanged: int
    errors: int
    conflicts: int


class AccrualStatsResponse(BaseModel):
    """Accrual statistics for dashboards."""

    total_balances: int
    last_run_date: date | None
    current_balances: int
