# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def _now_utc() -> datetime:
    return datetime.now(UTC)


class LeaveBalanceRecord(SQLModel, table=True):
    """Persisted leave ledger, one row per employee.

    The ledger itself lives in ``payload`` as serialized JSON; ``version``
    mirrors the payload's version and guards compare-and-swap writes.
    """

    __tablename__ = "leave_balance"

    employee_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    policy_id: uuid.UUID = Field(index=True)
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
    payload: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
