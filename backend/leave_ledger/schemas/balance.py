# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from leave_ledger.models.enums import LeaveCategory

_ZERO = Decimal("0")

# ---------------------------------------------------------------------------
# Ledger aggregate
# ---------------------------------------------------------------------------


class LeaveCategoryState(BaseModel):
    """Entitlement, accrual and usage for one leave category, in days."""

    model_config = ConfigDict(frozen=True)

    total_entitled: Decimal = Field(ge=0)
    accrued: Decimal = Field(ge=0)
    used: Decimal = Field(default=_ZERO, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining(self) -> Decimal:
        return max(_ZERO, self.accrued - self.used)


class LeaveBalance(BaseModel):
    """Per-employee leave ledger. Operations return new instances."""

    model_config = ConfigDict(frozen=True)

    employee_id: uuid.UUID
    employee_name: str
    policy_id: uuid.UUID
    hire_date: date
    last_accrual_date: date
    categories: dict[LeaveCategory, LeaveCategoryState]
    version: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _validate_invariants(self) -> Self:
        if LeaveCategory.MATERNITY in self.categories and LeaveCategory.PATERNITY in self.categories:
            msg = "A ledger cannot hold both maternity and paternity leave"
            raise ValueError(msg)
        for category, state in self.categories.items():
            if state.accrued > state.total_entitled:
                msg = f"{category.display_name}: accrued exceeds total entitled"
                raise ValueError(msg)
            if not category.accrues_gradually and state.accrued != state.total_entitled:
                msg = f"{category.display_name}: granted category must be fully accrued"
                raise ValueError(msg)
        return self

    def category(self, category: LeaveCategory) -> LeaveCategoryState | None:
        """Return the state of a category, or None if it was never granted."""
        return self.categories.get(category)


# ---------------------------------------------------------------------------
# Display projection
# ---------------------------------------------------------------------------


class CategoryBalance(BaseModel):
    """One row of the balance summary."""

    category: LeaveCategory
    label: str
    total_entitled: Decimal
    accrued: Decimal
    used: Decimal
    remaining: Decimal


class BalanceSummary(BaseModel):
    """Read-only view of an employee's ledger for rendering."""

    employee_id: uuid.UUID
    employee_name: str
    last_updated: date
    items: list[CategoryBalance]


class BalanceSummaryListResponse(BaseModel):
    """Summaries of every readable ledger. Corrupt records are counted in skipped."""

    items: list[BalanceSummary]
    total: int
    skipped: int = 0


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LeaveAmountRequest(BaseModel):
    """Request body for a debit or credit.

    Amounts are validated by the ledger so that non-positive values are
    reported as INVALID_AMOUNT rather than a schema error.
    """

    category: str = Field(min_length=1, max_length=100, description="Leave category name, e.g. 'Annual Leave'")
    days: Decimal
