# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, field_validator

from leave_ledger.models.enums import EmploymentStatus, Gender


class EmployeeInfo(BaseModel):
    """Employee record from the roster."""

    id: uuid.UUID
    name: str
    email: str | None = None
    hire_date: date
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    policy_id: uuid.UUID
    gender: Gender = Gender.UNSPECIFIED

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("gender", mode="before")
    @classmethod
    def _normalize_gender(cls, value: Any) -> Any:
        # Roster data is free text; anything unrecognised grants no parental category.
        if value is None:
            return Gender.UNSPECIFIED
        if isinstance(value, str):
            normalized = value.strip().upper()
            return normalized if normalized in Gender.__members__ else Gender.UNSPECIFIED
        return value


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the roster provider."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee. Returns None if not found."""
        ...

    async def list_active_employees(self) -> list[EmployeeInfo]:
        """List employees whose status is ACTIVE."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee. Returns None if not found."""
        return self._employees.get(employee_id)

    async def list_active_employees(self) -> list[EmployeeInfo]:
        """List employees whose status is ACTIVE."""
        return [e for e in self._employees.values() if e.status == EmploymentStatus.ACTIVE]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the roster provider."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service
