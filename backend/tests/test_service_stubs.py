"""Tests for the roster and policy service stubs."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from leave_ledger.models.enums import EmploymentStatus, Gender, LeaveCategory
from leave_ledger.services.employee import EmployeeInfo, EmployeeService, InMemoryEmployeeService
from leave_ledger.services.policy import InMemoryPolicyService, LeavePolicy, PolicyService

POLICY_ID = uuid.uuid4()


def _make_employee(name: str = "Jane", status: str = "ACTIVE", gender: str | None = None) -> EmployeeInfo:
    return EmployeeInfo.model_validate(
        {
            "id": uuid.uuid4(),
            "name": name,
            "email": f"{name.lower()}@example.com",
            "hire_date": date(2023, 9, 1),
            "status": status,
            "policy_id": POLICY_ID,
            "gender": gender,
        }
    )


# ---------------------------------------------------------------------------
# EmployeeInfo normalization
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("female", Gender.FEMALE),
        (" Male ", Gender.MALE),
        ("non-binary", Gender.UNSPECIFIED),
        ("", Gender.UNSPECIFIED),
        (None, Gender.UNSPECIFIED),
    ],
)
def test_gender_normalization(raw: str | None, expected: Gender) -> None:
    assert _make_employee(gender=raw).gender == expected


def test_status_normalization() -> None:
    assert _make_employee(status="inactive").status == EmploymentStatus.INACTIVE


# ---------------------------------------------------------------------------
# InMemoryEmployeeService tests
# ---------------------------------------------------------------------------


async def test_employee_service_get_not_found() -> None:
    svc = InMemoryEmployeeService()
    assert await svc.get_employee(uuid.uuid4()) is None


async def test_employee_service_seed_and_get() -> None:
    svc = InMemoryEmployeeService()
    emp = _make_employee()
    svc.seed(emp)
    result = await svc.get_employee(emp.id)
    assert result is not None
    assert result.id == emp.id


async def test_employee_service_lists_active_only() -> None:
    svc = InMemoryEmployeeService()
    active = _make_employee("Alice")
    inactive = _make_employee("Bob", status="INACTIVE")
    svc.seed(active)
    svc.seed(inactive)

    result = await svc.list_active_employees()
    assert [e.id for e in result] == [active.id]


def test_employee_service_satisfies_protocol() -> None:
    assert isinstance(InMemoryEmployeeService(), EmployeeService)


# ---------------------------------------------------------------------------
# InMemoryPolicyService tests
# ---------------------------------------------------------------------------


async def test_policy_service_get_not_found() -> None:
    assert await InMemoryPolicyService().get_policy(uuid.uuid4()) is None


async def test_policy_service_seed_and_get() -> None:
    svc = InMemoryPolicyService()
    policy = LeavePolicy(id=POLICY_ID, name="Standard", annual_leave=Decimal("21"))
    svc.seed(policy)
    result = await svc.get_policy(POLICY_ID)
    assert result is not None
    assert result.entitlement_for(LeaveCategory.ANNUAL) == Decimal("21")
    assert result.entitlement_for(LeaveCategory.PATERNITY) == Decimal("0")


def test_policy_rejects_negative_entitlement() -> None:
    with pytest.raises(ValueError):
        LeavePolicy(id=POLICY_ID, name="Broken", sick_leave=Decimal("-1"))


def test_policy_service_satisfies_protocol() -> None:
    assert isinstance(InMemoryPolicyService(), PolicyService)
