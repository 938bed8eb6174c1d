# ruff: noqa: TC003
from __future__ import annotations

from datetime import UTC, date, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def _now_utc() -> datetime:
    return datetime.now(UTC)


class AccrualRunMarker(SQLModel, table=True):
    """Date of the last completed batch run, keyed by job name."""

    __tablename__ = "accrual_run_marker"

    name: str = Field(primary_key=True, max_length=100)
    last_run_date: date
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
