# ruff: noqa: B008, TC001, TC003
"""API endpoints for the daily accrual batch."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import PoliciesDep, RosterDep, StoreDep
from leave_ledger.schemas.accrual import AccrualRunResponse, AccrualStatsResponse
from leave_ledger.services.scheduler import get_accrual_stats, run_daily_accrual

accruals_router = APIRouter(
    prefix="/accruals",
    tags=["accruals"],
)


@accruals_router.post("/trigger", response_model=AccrualRunResponse)
async def trigger_accruals(
    store: StoreDep,
    roster: RosterDep,
    policies: PoliciesDep,
    today: date | None = Query(default=None),
    force: bool = Query(default=False),
) -> AccrualRunResponse:
    """Manually run the daily accrual batch.

    A second trigger on the same day is a no-op unless ``force`` is set;
    even then, ledgers already current are left untouched.
    """
    result = await run_daily_accrual(store, roster, policies, today or date.today(), force=force)
    return AccrualRunResponse(
        today=result.today,
        already_ran=result.already_ran,
        processed=result.processed,
        initialized=result.initialized,
        recomputed=result.recomputed,
        unchanged=result.unchanged,
        errors=result.errors,
        conflicts=result.conflicts,
    )


@accruals_router.get("/stats", response_model=AccrualStatsResponse)
async def accrual_stats(
    store: StoreDep,
    today: date | None = Query(default=None),
) -> AccrualStatsResponse:
    """Ledger coverage and the date of the last accrual run."""
    stats = await get_accrual_stats(store, today or date.today())
    return AccrualStatsResponse(
        total_balances=stats.total_balances,
        last_run_date=stats.last_run_date,
        current_balances=stats.current_balances,
    )
