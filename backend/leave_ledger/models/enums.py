from __future__ import annotations

import enum


class LeaveCategory(enum.StrEnum):
    """Closed set of leave categories tracked by the ledger.

    Values are the keys used in persisted ledgers.
    """

    ANNUAL = "annualLeave"
    SICK = "sickLeave"
    PERSONAL = "personalLeave"
    STUDY = "studyLeave"
    MATERNITY = "maternityLeave"
    PATERNITY = "paternityLeave"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def accrues_gradually(self) -> bool:
        """Only annual leave is prorated over worked days."""
        return self is LeaveCategory.ANNUAL


_DISPLAY_NAMES: dict[LeaveCategory, str] = {
    LeaveCategory.ANNUAL: "Annual Leave",
    LeaveCategory.SICK: "Sick Leave",
    LeaveCategory.PERSONAL: "Personal Leave",
    LeaveCategory.STUDY: "Study Leave",
    LeaveCategory.MATERNITY: "Maternity Leave",
    LeaveCategory.PATERNITY: "Paternity Leave",
}


class EmploymentStatus(enum.StrEnum):
    """Roster status of an employee."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Gender(enum.StrEnum):
    """Gender as recorded on the roster; selects the parental leave category."""

    FEMALE = "FEMALE"
    MALE = "MALE"
    UNSPECIFIED = "UNSPECIFIED"


class LedgerErrorCode(enum.StrEnum):
    """Reportable ledger failures, returned as values rather than raised."""

    POLICY_NOT_FOUND = "POLICY_NOT_FOUND"
    UNKNOWN_LEAVE_CATEGORY = "UNKNOWN_LEAVE_CATEGORY"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CORRUPT_RECORD = "CORRUPT_RECORD"
    BALANCE_NOT_FOUND = "BALANCE_NOT_FOUND"
    BALANCE_EXISTS = "BALANCE_EXISTS"
    VERSION_CONFLICT = "VERSION_CONFLICT"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
