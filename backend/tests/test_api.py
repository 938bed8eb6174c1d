"""HTTP tests for the balance and accrual endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest

from leave_ledger.models.enums import Gender
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service
from leave_ledger.services.policy import InMemoryPolicyService, LeavePolicy, set_policy_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient

POLICY_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
EMPLOYEE_ID_2 = uuid.uuid4()
ORPHAN_ID = uuid.uuid4()
HIRE_DATE = date(2024, 1, 15)

BALANCE_URL = f"/employees/{EMPLOYEE_ID}/balance"
TRIGGER_URL = "/accruals/trigger"
STATS_URL = "/accruals/stats"
LIST_URL = "/balances"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _seed_services() -> Iterator[None]:
    """Seed the in-memory roster and policy services for every test."""
    roster = InMemoryEmployeeService()
    roster.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            name="Chipo Mutasa",
            email="chipo@example.com",
            hire_date=HIRE_DATE,
            policy_id=POLICY_ID,
            gender=Gender.FEMALE,
        )
    )
    roster.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID_2,
            name="Tatenda Moyo",
            hire_date=HIRE_DATE,
            policy_id=POLICY_ID,
            gender="male",  # type: ignore[arg-type]
        )
    )
    roster.seed(
        EmployeeInfo(
            id=ORPHAN_ID,
            name="No Policy",
            hire_date=HIRE_DATE,
            policy_id=uuid.uuid4(),
        )
    )
    policies = InMemoryPolicyService()
    policies.seed(
        LeavePolicy(
            id=POLICY_ID,
            name="Standard",
            annual_leave=Decimal("25"),
            sick_leave=Decimal("12"),
            personal_leave=Decimal("5"),
            study_leave=Decimal("3"),
            maternity_leave=Decimal("90"),
            paternity_leave=Decimal("10"),
        )
    )
    set_employee_service(roster)
    set_policy_service(policies)
    yield
    set_employee_service(InMemoryEmployeeService())
    set_policy_service(InMemoryPolicyService())


async def _initialize(client: AsyncClient, today: str = "2024-01-29") -> dict[str, Any]:
    response = await client.post(BALANCE_URL, params={"today": today})
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Balance endpoints
# ---------------------------------------------------------------------------


async def test_initialize_balance(async_client: AsyncClient) -> None:
    data = await _initialize(async_client)
    assert data["employee_id"] == str(EMPLOYEE_ID)
    assert data["version"] == 1
    assert data["last_accrual_date"] == "2024-01-29"
    assert Decimal(data["categories"]["annualLeave"]["accrued"]) == Decimal("0.99")
    assert Decimal(data["categories"]["sickLeave"]["remaining"]) == Decimal("12")
    assert "maternityLeave" in data["categories"]
    assert "paternityLeave" not in data["categories"]


async def test_initialize_twice_conflicts(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.post(BALANCE_URL, params={"today": "2024-01-29"})
    assert response.status_code == 409
    assert response.json()["error"] == "BALANCE_EXISTS"


async def test_initialize_unknown_employee(async_client: AsyncClient) -> None:
    response = await async_client.post(f"/employees/{uuid.uuid4()}/balance")
    assert response.status_code == 404
    assert response.json()["detail"] == "Employee not found"


async def test_initialize_missing_policy(async_client: AsyncClient) -> None:
    response = await async_client.post(f"/employees/{ORPHAN_ID}/balance")
    assert response.status_code == 404
    assert response.json()["error"] == "POLICY_NOT_FOUND"


async def test_get_balance(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.get(BALANCE_URL)
    assert response.status_code == 200
    assert response.json()["employee_name"] == "Chipo Mutasa"


async def test_get_balance_not_found(async_client: AsyncClient) -> None:
    response = await async_client.get(BALANCE_URL)
    assert response.status_code == 404


async def test_get_summary(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.get(f"{BALANCE_URL}/summary")
    assert response.status_code == 200
    data = response.json()
    assert data["last_updated"] == "2024-01-29"
    assert [item["label"] for item in data["items"]] == [
        "Annual Leave",
        "Sick Leave",
        "Personal Leave",
        "Study Leave",
        "Maternity Leave",
    ]


async def test_debit_and_credit(async_client: AsyncClient) -> None:
    await _initialize(async_client)

    response = await async_client.post(f"{BALANCE_URL}/debit", json={"category": "Sick Leave", "days": "2.5"})
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == 2
    assert Decimal(data["categories"]["sickLeave"]["remaining"]) == Decimal("9.5")

    response = await async_client.post(f"{BALANCE_URL}/credit", json={"category": "sickLeave", "days": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == 3
    assert Decimal(data["categories"]["sickLeave"]["used"]) == Decimal("1.5")


async def test_debit_insufficient_balance(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.post(f"{BALANCE_URL}/debit", json={"category": "Annual Leave", "days": 3})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "INSUFFICIENT_BALANCE"
    assert "0.99 remaining" in data["detail"]


async def test_debit_unknown_category(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.post(f"{BALANCE_URL}/debit", json={"category": "Vacation", "days": 1})
    assert response.status_code == 400
    assert response.json()["error"] == "UNKNOWN_LEAVE_CATEGORY"


async def test_debit_invalid_amount(async_client: AsyncClient) -> None:
    await _initialize(async_client)
    response = await async_client.post(f"{BALANCE_URL}/debit", json={"category": "Sick Leave", "days": -1})
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_AMOUNT"


async def test_debit_without_balance(async_client: AsyncClient) -> None:
    response = await async_client.post(f"{BALANCE_URL}/debit", json={"category": "Sick Leave", "days": 1})
    assert response.status_code == 404
    assert response.json()["error"] == "BALANCE_NOT_FOUND"


async def test_debit_rejects_malformed_body(async_client: AsyncClient) -> None:
    response = await async_client.post(f"{BALANCE_URL}/debit", json={"days": 1})
    assert response.status_code == 422


async def test_list_balances(async_client: AsyncClient) -> None:
    response = await async_client.get(LIST_URL)
    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 0, "skipped": 0}

    await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})
    response = await async_client.get(LIST_URL)
    data = response.json()
    assert data["total"] == 2
    assert [item["employee_name"] for item in data["items"]] == ["Chipo Mutasa", "Tatenda Moyo"]


async def test_list_balances_by_category(async_client: AsyncClient) -> None:
    await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})

    response = await async_client.get(LIST_URL, params={"category": "Paternity Leave"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["employee_id"] == str(EMPLOYEE_ID_2)
    assert [item["label"] for item in data["items"][0]["items"]] == ["Paternity Leave"]


async def test_list_balances_unknown_category(async_client: AsyncClient) -> None:
    response = await async_client.get(LIST_URL, params={"category": "Vacation"})
    assert response.status_code == 400
    assert response.json()["error"] == "UNKNOWN_LEAVE_CATEGORY"


# ---------------------------------------------------------------------------
# Accrual endpoints
# ---------------------------------------------------------------------------


async def test_trigger_bootstraps_roster(async_client: AsyncClient) -> None:
    response = await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})
    assert response.status_code == 200
    data = response.json()
    assert data["already_ran"] is False
    assert data["initialized"] == 2
    assert data["errors"] == 1

    response = await async_client.get(f"/employees/{EMPLOYEE_ID_2}/balance")
    assert response.status_code == 200
    assert "paternityLeave" in response.json()["categories"]


async def test_trigger_twice_same_day(async_client: AsyncClient) -> None:
    await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})
    response = await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})
    assert response.status_code == 200
    assert response.json()["already_ran"] is True

    response = await async_client.post(TRIGGER_URL, params={"today": "2024-02-05", "force": "true"})
    data = response.json()
    assert data["already_ran"] is False
    assert data["unchanged"] == 2
    assert data["recomputed"] == 0


async def test_trigger_next_day_recomputes(async_client: AsyncClient) -> None:
    await _initialize(async_client, today="2024-02-05")
    response = await async_client.post(TRIGGER_URL, params={"today": "2024-02-12"})
    data = response.json()
    assert data["recomputed"] == 1
    assert data["initialized"] == 1

    response = await async_client.get(BALANCE_URL)
    body = response.json()
    assert body["last_accrual_date"] == "2024-02-12"
    assert body["version"] == 2


async def test_accrual_stats(async_client: AsyncClient) -> None:
    response = await async_client.get(STATS_URL, params={"today": "2024-02-05"})
    assert response.status_code == 200
    assert response.json() == {"total_balances": 0, "last_run_date": None, "current_balances": 0}

    await async_client.post(TRIGGER_URL, params={"today": "2024-02-05"})
    response = await async_client.get(STATS_URL, params={"today": "2024-02-05"})
    assert response.json() == {"total_balances": 2, "last_run_date": "2024-02-05", "current_balances": 2}


async def test_response_carries_process_time(async_client: AsyncClient) -> None:
    response = await async_client.get(STATS_URL)
    assert "x-process-time" in response.headers
