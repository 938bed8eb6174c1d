# ruff: noqa: TC003
"""Leave request decisions, applied against the ledger.

Approval debits the ledger before the request changes state, so a request
whose debit fails stays PENDING. Cancelling an approved request credits
the days back.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from fastapi import status
from pydantic import BaseModel, Field

from leave_ledger.exceptions import AppError, ledger_error_to_app_error
from leave_ledger.models.enums import RequestStatus
from leave_ledger.services.ledger import LedgerError

if TYPE_CHECKING:
    from leave_ledger.services.balance import LeaveLedgerService


class LeaveRequest(BaseModel):
    """An employee's request for leave days from one category."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    employee_id: uuid.UUID
    category: str = Field(min_length=1)
    days: Decimal = Field(gt=0)
    status: RequestStatus = RequestStatus.PENDING
    decision_note: str | None = None


def _require_status(request: LeaveRequest, *allowed: RequestStatus) -> None:
    if request.status not in allowed:
        raise AppError(
            f"Cannot transition request from {request.status}",
            status_code=status.HTTP_409_CONFLICT,
        )


async def approve_request(
    ledger_service: LeaveLedgerService,
    request: LeaveRequest,
    decision_note: str | None = None,
) -> LeaveRequest:
    """Approve a pending request, debiting the ledger first.

    Raises AppError with the ledger's message (which carries the remaining
    days on an insufficient balance) and leaves the request untouched when
    the debit fails.
    """
    _require_status(request, RequestStatus.PENDING)

    result = await ledger_service.debit(request.employee_id, request.category, request.days)
    if isinstance(result, LedgerError):
        raise ledger_error_to_app_error(result)

    return request.model_copy(update={"status": RequestStatus.APPROVED, "decision_note": decision_note})


def reject_request(request: LeaveRequest, decision_note: str | None = None) -> LeaveRequest:
    """Reject a pending request. The ledger is not touched."""
    _require_status(request, RequestStatus.PENDING)
    return request.model_copy(update={"status": RequestStatus.REJECTED, "decision_note": decision_note})


async def cancel_request(ledger_service: LeaveLedgerService, request: LeaveRequest) -> LeaveRequest:
    """Cancel a pending or approved request, crediting back approved days."""
    _require_status(request, RequestStatus.PENDING, RequestStatus.APPROVED)

    if request.status == RequestStatus.APPROVED:
        result = await ledger_service.credit(request.employee_id, request.category, request.days)
        if isinstance(result, LedgerError):
            raise ledger_error_to_app_error(result)

    return request.model_copy(update={"status": RequestStatus.CANCELLED})
