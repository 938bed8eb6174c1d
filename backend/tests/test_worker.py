"""Tests for the accrual worker process."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from leave_ledger import worker
from leave_ledger.config import Settings
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service
from leave_ledger.services.policy import InMemoryPolicyService, LeavePolicy, set_policy_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

POLICY_ID = uuid.uuid4()


class _StopLoop(BaseException):
    """Escapes the worker loop, which only survives ordinary exceptions."""


@pytest.fixture(autouse=True)
def _seed_services() -> Iterator[None]:
    roster = InMemoryEmployeeService()
    roster.seed(EmployeeInfo(id=uuid.uuid4(), name="Kuda Zhou", hire_date=date(2024, 1, 8), policy_id=POLICY_ID))
    policies = InMemoryPolicyService()
    policies.seed(LeavePolicy(id=POLICY_ID, name="Standard", annual_leave=Decimal("20"), sick_leave=Decimal("5")))
    set_employee_service(roster)
    set_policy_service(policies)
    yield
    set_employee_service(InMemoryEmployeeService())
    set_policy_service(InMemoryPolicyService())


async def test_run_once_uses_configured_database(engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    monkeypatch.setattr(worker, "get_session_factory", lambda: factory)

    first = await worker.run_once(date(2024, 2, 5))
    assert first.initialized == 1
    assert first.already_ran is False

    second = await worker.run_once(date(2024, 2, 5))
    assert second.already_ran is True


async def test_loop_survives_failed_run(monkeypatch: pytest.MonkeyPatch) -> None:
    run_once = AsyncMock(side_effect=[RuntimeError("database down"), _StopLoop()])
    dispose = AsyncMock()
    monkeypatch.setattr(worker, "get_settings", lambda: Settings(accrual_interval_seconds=0))
    monkeypatch.setattr(worker, "run_once", run_once)
    monkeypatch.setattr(worker, "dispose_engine", dispose)

    with pytest.raises(_StopLoop):
        await worker.run_accrual_loop()

    assert run_once.await_count == 2
    dispose.assert_awaited_once()
