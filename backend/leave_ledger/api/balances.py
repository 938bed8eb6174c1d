# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TypeVar

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import LedgerServiceDep, PoliciesDep, RosterDep
from leave_ledger.exceptions import AppError, ledger_error_to_app_error
from leave_ledger.schemas.balance import (
    BalanceSummary,
    BalanceSummaryListResponse,
    LeaveAmountRequest,
    LeaveBalance,
)
from leave_ledger.services import ledger
from leave_ledger.models.enums import LedgerErrorCode
from leave_ledger.services.ledger import LedgerError

T = TypeVar("T")

balance_router = APIRouter(
    prefix="/employees/{employee_id}/balance",
    tags=["balances"],
)
balances_router = APIRouter(prefix="/balances", tags=["balances"])


def _unwrap(result: T | LedgerError | None) -> T:
    """Return a successful result or raise the matching AppError."""
    if result is None:
        raise AppError("Leave balance not found", status_code=status.HTTP_404_NOT_FOUND)
    if isinstance(result, LedgerError):
        raise ledger_error_to_app_error(result)
    return result


@balances_router.get("", response_model=BalanceSummaryListResponse)
async def list_balances(
    service: LedgerServiceDep,
    category: str | None = Query(default=None),
) -> BalanceSummaryListResponse:
    """List balance summaries for every employee, optionally for one leave category."""
    leave_category = None
    if category is not None:
        leave_category = ledger.resolve_category(category)
        if leave_category is None:
            raise AppError(
                f"Unknown leave category: {category}",
                status_code=status.HTTP_400_BAD_REQUEST,
                error=LedgerErrorCode.UNKNOWN_LEAVE_CATEGORY.value,
            )

    listing = await service.list_summaries(leave_category)
    return BalanceSummaryListResponse(items=listing.items, total=len(listing.items), skipped=listing.skipped)


@balance_router.get("", response_model=LeaveBalance)
async def get_balance(employee_id: uuid.UUID, service: LedgerServiceDep) -> LeaveBalance:
    """Get an employee's leave ledger."""
    return _unwrap(await service.get_balance(employee_id))


@balance_router.get("/summary", response_model=BalanceSummary)
async def get_balance_summary(employee_id: uuid.UUID, service: LedgerServiceDep) -> BalanceSummary:
    """Get the per-category balance summary for display."""
    return _unwrap(await service.get_summary(employee_id))


@balance_router.post("", response_model=LeaveBalance, status_code=status.HTTP_201_CREATED)
async def initialize_balance(
    employee_id: uuid.UUID,
    service: LedgerServiceDep,
    roster: RosterDep,
    policies: PoliciesDep,
    today: date | None = Query(default=None),
) -> LeaveBalance:
    """Create the ledger for an onboarded employee from their roster record and policy."""
    employee = await roster.get_employee(employee_id)
    if employee is None:
        raise AppError("Employee not found", status_code=status.HTTP_404_NOT_FOUND)

    policy = await policies.get_policy(employee.policy_id)
    return _unwrap(await service.initialize(employee, policy, today or date.today()))


@balance_router.post("/debit", response_model=LeaveBalance)
async def debit_balance(
    employee_id: uuid.UUID,
    payload: LeaveAmountRequest,
    service: LedgerServiceDep,
) -> LeaveBalance:
    """Deduct days from a leave category."""
    return _unwrap(await service.debit(employee_id, payload.category, payload.days))


@balance_router.post("/credit", response_model=LeaveBalance)
async def credit_balance(
    employee_id: uuid.UUID,
    payload: LeaveAmountRequest,
    service: LedgerServiceDep,
) -> LeaveBalance:
    """Return days to a leave category."""
    return _unwrap(await service.credit(employee_id, payload.category, payload.days))
