# ruff: noqa: TC003
"""Persistence for leave ledgers and the batch run marker.

Writes are compare-and-swap on the ledger version: a ledger at version N
may only replace a stored ledger at version N - 1, and a ledger at
version 1 may only be inserted where none exists.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.models.balance import LeaveBalanceRecord
from leave_ledger.models.run_marker import AccrualRunMarker
from leave_ledger.services.ledger import dump_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.balance import LeaveBalance

logger = logging.getLogger(__name__)

DAILY_ACCRUAL_MARKER = "daily_accrual"


@dataclass(frozen=True)
class StoredBalance:
    """A ledger as persisted, before validation."""

    employee_id: uuid.UUID
    version: int
    payload: Any


@runtime_checkable
class BalanceStore(Protocol):
    """Interface for ledger persistence."""

    async def load_all_balances(self) -> list[StoredBalance]:
        """Return every stored ledger."""
        ...

    async def load_balance(self, employee_id: uuid.UUID) -> StoredBalance | None:
        """Return one stored ledger, or None."""
        ...

    async def save_balance(self, balance: LeaveBalance) -> bool:
        """Persist one ledger. Returns False on a version conflict."""
        ...

    async def save_all_balances(self, balances: Sequence[LeaveBalance]) -> list[uuid.UUID]:
        """Persist ledgers in one batch. Returns employee IDs that conflicted."""
        ...

    async def get_last_run_date(self) -> date | None:
        """Return the date of the last completed batch run."""
        ...

    async def set_last_run_date(self, run_date: date) -> None:
        """Record the date of a completed batch run. Never moves the marker backward."""
        ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryBalanceStore:
    """Dict-backed store for development and tests."""

    def __init__(self) -> None:
        self._records: dict[uuid.UUID, StoredBalance] = {}
        self._last_run_date: date | None = None

    def seed_payload(self, employee_id: uuid.UUID, payload: Any, version: int = 1) -> None:
        """Store a raw payload as-is, bypassing validation."""
        self._records[employee_id] = StoredBalance(employee_id=employee_id, version=version, payload=payload)

    def _can_write(self, balance: LeaveBalance) -> bool:
        current = self._records.get(balance.employee_id)
        if current is None:
            return balance.version == 1
        return current.version == balance.version - 1

    def _write(self, balance: LeaveBalance) -> None:
        self._records[balance.employee_id] = StoredBalance(
            employee_id=balance.employee_id,
            version=balance.version,
            payload=dump_balance(balance),
        )

    async def load_all_balances(self) -> list[StoredBalance]:
        return [copy.deepcopy(record) for record in self._records.values()]

    async def load_balance(self, employee_id: uuid.UUID) -> StoredBalance | None:
        record = self._records.get(employee_id)
        return copy.deepcopy(record) if record is not None else None

    async def save_balance(self, balance: LeaveBalance) -> bool:
        if not self._can_write(balance):
            return False
        self._write(balance)
        return True

    async def save_all_balances(self, balances: Sequence[LeaveBalance]) -> list[uuid.UUID]:
        conflicts = [b.employee_id for b in balances if not self._can_write(b)]
        for balance in balances:
            if balance.employee_id not in conflicts:
                self._write(balance)
        return conflicts

    async def get_last_run_date(self) -> date | None:
        return self._last_run_date

    async def set_last_run_date(self, run_date: date) -> None:
        if self._last_run_date is None or run_date > self._last_run_date:
            self._last_run_date = run_date


# ---------------------------------------------------------------------------
# SQL store
# ---------------------------------------------------------------------------


class SqlBalanceStore:
    """Store backed by the ``leave_balance`` and ``accrual_run_marker`` tables.

    Each write method commits its own transaction; a batch save commits once.
    Inserts run inside a savepoint so that a row created concurrently by
    another session is reported as a conflict instead of aborting the batch.
    """

    def __init__(self, session: AsyncSession, marker_name: str = DAILY_ACCRUAL_MARKER) -> None:
        self._session = session
        self._marker_name = marker_name

    async def _insert(self, balance: LeaveBalance, payload: dict[str, Any]) -> bool:
        try:
            async with self._session.begin_nested():
                await self._session.execute(
                    insert(LeaveBalanceRecord).values(
                        employee_id=balance.employee_id,
                        policy_id=balance.policy_id,
                        version=balance.version,
                        payload=payload,
                    )
                )
        except IntegrityError:
            logger.info("Balance for employee=%s already exists; insert skipped", balance.employee_id)
            return False
        return True

    async def _write(self, balance: LeaveBalance) -> bool:
        payload = dump_balance(balance)

        if balance.version == 1:
            return await self._insert(balance, payload)

        result = await self._session.execute(
            update(LeaveBalanceRecord)
            .where(
                col(LeaveBalanceRecord.employee_id) == balance.employee_id,
                col(LeaveBalanceRecord.version) == balance.version - 1,
            )
            .values(
                policy_id=balance.policy_id,
                version=balance.version,
                payload=payload,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def load_all_balances(self) -> list[StoredBalance]:
        result = await self._session.execute(
            select(
                col(LeaveBalanceRecord.employee_id),
                col(LeaveBalanceRecord.version),
                col(LeaveBalanceRecord.payload),
            ).order_by(col(LeaveBalanceRecord.employee_id))
        )
        return [
            StoredBalance(employee_id=row.employee_id, version=row.version, payload=row.payload)
            for row in result.all()
        ]

    async def load_balance(self, employee_id: uuid.UUID) -> StoredBalance | None:
        result = await self._session.execute(
            select(
                col(LeaveBalanceRecord.employee_id),
                col(LeaveBalanceRecord.version),
                col(LeaveBalanceRecord.payload),
            ).where(col(LeaveBalanceRecord.employee_id) == employee_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return StoredBalance(employee_id=row.employee_id, version=row.version, payload=row.payload)

    async def save_balance(self, balance: LeaveBalance) -> bool:
        written = await self._write(balance)
        await self._session.commit()
        return written

    async def save_all_balances(self, balances: Sequence[LeaveBalance]) -> list[uuid.UUID]:
        conflicts: list[uuid.UUID] = []
        for balance in balances:
            if not await self._write(balance):
                conflicts.append(balance.employee_id)
        await self._session.commit()
        return conflicts

    async def get_last_run_date(self) -> date | None:
        return await self._session.scalar(
            select(col(AccrualRunMarker.last_run_date)).where(col(AccrualRunMarker.name) == self._marker_name)
        )

    async def set_last_run_date(self, run_date: date) -> None:
        if await self.get_last_run_date() is None:
            try:
                async with self._session.begin_nested():
                    await self._session.execute(
                        insert(AccrualRunMarker).values(name=self._marker_name, last_run_date=run_date)
                    )
            except IntegrityError:
                # Created by a concurrent run; the conditional update below applies.
                logger.info("Run marker %s created concurrently", self._marker_name)

        await self._session.execute(
            update(AccrualRunMarker)
            .where(
                col(AccrualRunMarker.name) == self._marker_name,
                col(AccrualRunMarker.last_run_date) < run_date,
            )
            .values(last_run_date=run_date, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        await self._session.commit()
