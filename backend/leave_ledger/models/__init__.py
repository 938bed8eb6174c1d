from sqlmodel import SQLModel

from leave_ledger.models.balance import LeaveBalanceRecord
from leave_ledger.models.enums import (
    EmploymentStatus,
    Gender,
    LeaveCategory,
    LedgerErrorCode,
    RequestStatus,
)
from leave_ledger.models.run_marker import AccrualRunMarker

__all__ = [
    "AccrualRunMarker",
    "EmploymentStatus",
    "Gender",
    "LeaveBalanceRecord",
    "LeaveCategory",
    "LedgerErrorCode",
    "RequestStatus",
    "SQLModel",
]
