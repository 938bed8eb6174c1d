"""Accrual calculator: prorates the annual entitlement over working days since hire."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_FLOOR, Decimal

from leave_ledger.services.calendar import count_working_days

# Fixed approximation: 365 - 104 weekend days - 10 public holidays.
WORKING_DAYS_PER_YEAR = 251

_ZERO = Decimal("0")
_CENT = Decimal("0.01")


def worked_days(hire_date: date, as_of_date: date) -> int:
    """Working days completed from the hire date up to, not including, as_of_date."""
    return count_working_days(hire_date, as_of_date - timedelta(days=1))


def accrued_annual_leave(
    hire_date: date,
    as_of_date: date,
    annual_entitlement: Decimal,
) -> Decimal:
    """Compute annual leave accrued as of a date.

    Prorated linearly over worked days, floored to two decimal places and
    capped at the entitlement. Always computed from the hire date, so the
    result depends only on its inputs and catching up after missed days
    cannot drift.

    The product is taken before dividing so that a full year of worked
    days lands exactly on the entitlement.
    """
    entitlement = Decimal(annual_entitlement)
    if entitlement <= _ZERO or as_of_date <= hire_date:
        return _ZERO

    days = worked_days(hire_date, as_of_date)
    prorated = (Decimal(days) * entitlement / WORKING_DAYS_PER_YEAR).quantize(_CENT, rounding=ROUND_FLOOR)
    return min(prorated, entitlement)
