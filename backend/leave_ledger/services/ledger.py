"""Pure ledger operations over LeaveBalance.

Nothing here performs I/O or reads the clock. Every operation returns either
a new LeaveBalance (with its version bumped) or a LedgerError describing why
the balance was left untouched.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from leave_ledger.models.enums import Gender, LeaveCategory, LedgerErrorCode
from leave_ledger.schemas.balance import BalanceSummary, CategoryBalance, LeaveBalance, LeaveCategoryState
from leave_ledger.services.accrual import accrued_annual_leave

if TYPE_CHECKING:
    from leave_ledger.services.employee import EmployeeInfo
    from leave_ledger.services.policy import LeavePolicy

_ZERO = Decimal("0")

_BASE_CATEGORIES = (
    LeaveCategory.ANNUAL,
    LeaveCategory.SICK,
    LeaveCategory.PERSONAL,
    LeaveCategory.STUDY,
)

_PARENTAL_CATEGORY: dict[Gender, LeaveCategory] = {
    Gender.FEMALE: LeaveCategory.MATERNITY,
    Gender.MALE: LeaveCategory.PATERNITY,
}


@dataclass(frozen=True)
class LedgerError:
    """A reportable ledger failure."""

    code: LedgerErrorCode
    message: str
    employee_id: uuid.UUID | None = None
    category: LeaveCategory | None = None
    remaining: Decimal | None = None


LedgerResult = LeaveBalance | LedgerError


# ---------------------------------------------------------------------------
# Category resolution
# ---------------------------------------------------------------------------


def _build_category_lookup() -> dict[str, LeaveCategory]:
    lookup: dict[str, LeaveCategory] = {}
    for category in LeaveCategory:
        lookup[category.display_name.lower()] = category
        lookup[category.value.lower()] = category
    return lookup


_CATEGORY_LOOKUP = _build_category_lookup()


def resolve_category(name: str) -> LeaveCategory | None:
    """Resolve a category by display name ("Annual Leave") or key ("annualLeave").

    Matching ignores case and repeated whitespace. Returns None for names
    outside the enumeration.
    """
    return _CATEGORY_LOOKUP.get(" ".join(name.split()).lower())


def granted_categories(gender: Gender) -> tuple[LeaveCategory, ...]:
    """Categories a new ledger receives; at most one parental category."""
    parental = _PARENTAL_CATEGORY.get(gender)
    if parental is None:
        return _BASE_CATEGORIES
    return (*_BASE_CATEGORIES, parental)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _to_amount(days: Decimal | int | float | str) -> Decimal | None:
    """Coerce a day count to a finite positive Decimal, or None."""
    if isinstance(days, bool):
        return None
    try:
        amount = Decimal(str(days)) if isinstance(days, float) else Decimal(days)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount <= _ZERO:
        return None
    return amount


def _replace_category(balance: LeaveBalance, category: LeaveCategory, state: LeaveCategoryState) -> LeaveBalance:
    categories = dict(balance.categories)
    categories[category] = state
    return balance.model_copy(update={"categories": categories, "version": balance.version + 1})


def _resolve_granted(
    balance: LeaveBalance,
    category_name: str,
) -> tuple[LeaveCategory, LeaveCategoryState] | LedgerError:
    category = resolve_category(category_name)
    if category is None:
        return LedgerError(
            code=LedgerErrorCode.UNKNOWN_LEAVE_CATEGORY,
            message=f"Unknown leave category '{category_name}'",
            employee_id=balance.employee_id,
        )
    state = balance.category(category)
    if state is None:
        return LedgerError(
            code=LedgerErrorCode.UNKNOWN_LEAVE_CATEGORY,
            message=f"{category.display_name} is not granted to employee {balance.employee_id}",
            employee_id=balance.employee_id,
            category=category,
        )
    return category, state


def _invalid_amount(balance: LeaveBalance, days: object) -> LedgerError:
    return LedgerError(
        code=LedgerErrorCode.INVALID_AMOUNT,
        message=f"Day count must be a positive number, got {days!r}",
        employee_id=balance.employee_id,
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def initialize_balance(employee: EmployeeInfo, policy: LeavePolicy | None, today: date) -> LedgerResult:
    """Build a new ledger for an employee from their policy.

    Annual leave is prorated from the hire date; every other granted
    category is credited in full.
    """
    if policy is None:
        return LedgerError(
            code=LedgerErrorCode.POLICY_NOT_FOUND,
            message=f"No leave policy {employee.policy_id} for employee {employee.id}",
            employee_id=employee.id,
        )

    categories: dict[LeaveCategory, LeaveCategoryState] = {}
    for category in granted_categories(employee.gender):
        entitled = policy.entitlement_for(category)
        if category.accrues_gradually:
            accrued = accrued_annual_leave(employee.hire_date, today, entitled)
        else:
            accrued = entitled
        categories[category] = LeaveCategoryState(total_entitled=entitled, accrued=accrued)

    return LeaveBalance(
        employee_id=employee.id,
        employee_name=employee.name,
        policy_id=policy.id,
        hire_date=employee.hire_date,
        last_accrual_date=today,
        categories=categories,
    )


def recompute_accrual(balance: LeaveBalance, policy: LeavePolicy | None, today: date) -> LedgerResult:
    """Bring annual leave up to date as of today.

    Returns the same instance when today is not after last_accrual_date,
    which covers both a repeat call on the same day and a clock running
    behind. Accrual is recomputed from the hire date against the
    entitlement frozen at initialization, so skipped days need no replay.
    """
    if policy is None:
        return LedgerError(
            code=LedgerErrorCode.POLICY_NOT_FOUND,
            message=f"No leave policy {balance.policy_id} for employee {balance.employee_id}",
            employee_id=balance.employee_id,
        )
    if today <= balance.last_accrual_date:
        return balance

    categories = dict(balance.categories)
    annual = categories.get(LeaveCategory.ANNUAL)
    if annual is not None:
        accrued = accrued_annual_leave(balance.hire_date, today, annual.total_entitled)
        categories[LeaveCategory.ANNUAL] = annual.model_copy(update={"accrued": max(annual.accrued, accrued)})

    return balance.model_copy(
        update={"categories": categories, "last_accrual_date": today, "version": balance.version + 1}
    )


def debit(balance: LeaveBalance, category_name: str, days: Decimal | int | float | str) -> LedgerResult:
    """Consume days from a category. Fails without change if remaining is short."""
    amount = _to_amount(days)
    if amount is None:
        return _invalid_amount(balance, days)

    resolved = _resolve_granted(balance, category_name)
    if isinstance(resolved, LedgerError):
        return resolved
    category, state = resolved

    if amount > state.remaining:
        return LedgerError(
            code=LedgerErrorCode.INSUFFICIENT_BALANCE,
            message=(
                f"Insufficient {category.display_name} balance: requested {amount} days, {state.remaining} remaining"
            ),
            employee_id=balance.employee_id,
            category=category,
            remaining=state.remaining,
        )

    return _replace_category(balance, category, state.model_copy(update={"used": state.used + amount}))


def credit(balance: LeaveBalance, category_name: str, days: Decimal | int | float | str) -> LedgerResult:
    """Return days to a category, e.g. when an approved request is cancelled."""
    amount = _to_amount(days)
    if amount is None:
        return _invalid_amount(balance, days)

    resolved = _resolve_granted(balance, category_name)
    if isinstance(resolved, LedgerError):
        return resolved
    category, state = resolved

    return _replace_category(balance, category, state.model_copy(update={"used": max(_ZERO, state.used - amount)}))


# ---------------------------------------------------------------------------
# Serialization and projection
# ---------------------------------------------------------------------------


def parse_balance(payload: Any, employee_id: uuid.UUID | None = None) -> LedgerResult:
    """Validate a stored payload into a LeaveBalance."""
    try:
        return LeaveBalance.model_validate(payload)
    except ValidationError as exc:
        return LedgerError(
            code=LedgerErrorCode.CORRUPT_RECORD,
            message=f"Stored ledger is corrupt: {exc.error_count()} validation error(s)",
            employee_id=employee_id,
        )


def dump_balance(balance: LeaveBalance) -> dict[str, Any]:
    """Serialize a ledger to a JSON-safe dict for storage."""
    return balance.model_dump(mode="json")


def build_balance_summary(balance: LeaveBalance) -> BalanceSummary:
    """Project a ledger into display rows, in fixed category order."""
    items = [
        CategoryBalance(
            category=category,
            label=category.display_name,
            total_entitled=state.total_entitled,
            accrued=state.accrued,
            used=state.used,
            remaining=state.remaining,
        )
        for category in LeaveCategory
        if (state := balance.category(category)) is not None
    ]
    return BalanceSummary(
        employee_id=balance.employee_id,
        employee_name=balance.employee_name,
        last_updated=balance.last_accrual_date,
        items=items,
    )
