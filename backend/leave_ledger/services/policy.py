# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from leave_ledger.models.enums import LeaveCategory


class LeavePolicy(BaseModel):
    """A client's leave entitlement table, in days per year."""

    id: uuid.UUID
    name: str
    annual_leave: Decimal = Field(default=Decimal("0"), ge=0)
    sick_leave: Decimal = Field(default=Decimal("0"), ge=0)
    personal_leave: Decimal = Field(default=Decimal("0"), ge=0)
    study_leave: Decimal = Field(default=Decimal("0"), ge=0)
    maternity_leave: Decimal = Field(default=Decimal("0"), ge=0)
    paternity_leave: Decimal = Field(default=Decimal("0"), ge=0)

    def entitlement_for(self, category: LeaveCategory) -> Decimal:
        """Return the policy's entitlement for a category."""
        return {
            LeaveCategory.ANNUAL: self.annual_leave,
            LeaveCategory.SICK: self.sick_leave,
            LeaveCategory.PERSONAL: self.personal_leave,
            LeaveCategory.STUDY: self.study_leave,
            LeaveCategory.MATERNITY: self.maternity_leave,
            LeaveCategory.PATERNITY: self.paternity_leave,
        }[category]


@runtime_checkable
class PolicyService(Protocol):
    """Interface for the client policy provider."""

    async def get_policy(self, policy_id: uuid.UUID) -> LeavePolicy | None:
        """Fetch a policy. Returns None if not found."""
        ...


class InMemoryPolicyService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._policies: dict[uuid.UUID, LeavePolicy] = {}

    def seed(self, policy: LeavePolicy) -> None:
        """Seed a policy for testing."""
        self._policies[policy.id] = policy

    async def get_policy(self, policy_id: uuid.UUID) -> LeavePolicy | None:
        """Fetch a policy. Returns None if not found."""
        return self._policies.get(policy_id)


_policy_service: PolicyService = InMemoryPolicyService()


def get_policy_service() -> PolicyService:
    """FastAPI dependency for the policy provider."""
    return _policy_service


def set_policy_service(service: PolicyService) -> None:
    """Override the service (for testing or production wiring)."""
    global _policy_service
    _policy_service = service
