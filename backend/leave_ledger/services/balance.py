"""Store-backed ledger operations, serialized per employee."""

from __future__ import annotations

import asyncio
import logging
import uuid
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from leave_ledger.models.enums import LedgerErrorCode
from leave_ledger.schemas.balance import BalanceSummary, LeaveBalance
from leave_ledger.services import ledger
from leave_ledger.services.ledger import LedgerError, LedgerResult

if TYPE_CHECKING:
    from datetime import date

    from leave_ledger.models.enums import LeaveCategory
    from leave_ledger.services.employee import EmployeeInfo
    from leave_ledger.services.policy import LeavePolicy
    from leave_ledger.services.store import BalanceStore

logger = logging.getLogger(__name__)

# Attempts at a compare-and-swap write before reporting a conflict.
_MAX_WRITE_ATTEMPTS = 3

# Per-employee locks shared by every service instance in the process. An
# entry disappears once no coroutine holds or awaits its lock.
_employee_locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = weakref.WeakValueDictionary()


def _employee_lock(employee_id: uuid.UUID) -> asyncio.Lock:
    lock = _employee_locks.get(employee_id)
    if lock is None:
        lock = asyncio.Lock()
        _employee_locks[employee_id] = lock
    return lock


@dataclass
class SummaryListing:
    """Display summaries for every readable ledger."""

    items: list[BalanceSummary] = field(default_factory=list)
    skipped: int = 0


class LeaveLedgerService:
    """Reads and mutates ledgers held in a BalanceStore.

    Mutations for one employee are serialized through a process-wide
    asyncio.Lock, so concurrent requests in one process queue up even though
    each gets its own service. Across processes the store's version check
    rejects writes based on a stale read, and the mutation is retried against
    a fresh copy.
    """

    def __init__(self, store: BalanceStore) -> None:
        self._store = store

    async def _load(self, employee_id: uuid.UUID) -> LedgerResult | None:
        stored = await self._store.load_balance(employee_id)
        if stored is None:
            return None
        return ledger.parse_balance(stored.payload, employee_id)

    async def _mutate(
        self,
        employee_id: uuid.UUID,
        operation: Callable[[LeaveBalance], LedgerResult],
    ) -> LedgerResult:
        async with _employee_lock(employee_id):
            for attempt in range(1, _MAX_WRITE_ATTEMPTS + 1):
                current = await self._load(employee_id)
                if current is None:
                    return LedgerError(
                        code=LedgerErrorCode.BALANCE_NOT_FOUND,
                        message=f"No leave balance for employee {employee_id}",
                        employee_id=employee_id,
                    )
                if isinstance(current, LedgerError):
                    return current

                updated = operation(current)
                if isinstance(updated, LedgerError) or updated is current:
                    return updated
                if await self._store.save_balance(updated):
                    return updated
                logger.warning("Version conflict writing balance for employee=%s (attempt %d)", employee_id, attempt)

        return LedgerError(
            code=LedgerErrorCode.VERSION_CONFLICT,
            message=f"Leave balance for employee {employee_id} was modified concurrently",
            employee_id=employee_id,
        )

    # -----------------------------------------------------------------------
    # Read path
    # -----------------------------------------------------------------------

    async def get_balance(self, employee_id: uuid.UUID) -> LedgerResult | None:
        """Return the employee's ledger, None if absent, or CORRUPT_RECORD."""
        return await self._load(employee_id)

    async def get_summary(self, employee_id: uuid.UUID) -> BalanceSummary | LedgerError | None:
        """Return the display projection of the employee's ledger."""
        balance = await self._load(employee_id)
        if balance is None or isinstance(balance, LedgerError):
            return balance
        return ledger.build_balance_summary(balance)

    async def list_summaries(self, category: LeaveCategory | None = None) -> SummaryListing:
        """Summaries of every stored ledger, ordered by employee name.

        With a category, only ledgers granting it are listed and each summary
        is narrowed to that category. Corrupt records are skipped and counted.
        """
        listing = SummaryListing()
        for stored in await self._store.load_all_balances():
            balance = ledger.parse_balance(stored.payload, stored.employee_id)
            if isinstance(balance, LedgerError):
                logger.warning("Skipping employee=%s in balance listing: %s", stored.employee_id, balance.message)
                listing.skipped += 1
                continue
            if category is not None and balance.category(category) is None:
                continue

            summary = ledger.build_balance_summary(balance)
            if category is not None:
                summary = summary.model_copy(
                    update={"items": [item for item in summary.items if item.category == category]}
                )
            listing.items.append(summary)

        listing.items.sort(key=lambda s: (s.employee_name.lower(), str(s.employee_id)))
        return listing

    # -----------------------------------------------------------------------
    # Write path
    # -----------------------------------------------------------------------

    async def initialize(self, employee: EmployeeInfo, policy: LeavePolicy | None, today: date) -> LedgerResult:
        """Create the ledger for a newly onboarded employee."""
        async with _employee_lock(employee.id):
            if await self._store.load_balance(employee.id) is not None:
                return LedgerError(
                    code=LedgerErrorCode.BALANCE_EXISTS,
                    message=f"Employee {employee.id} already has a leave balance",
                    employee_id=employee.id,
                )

            balance = ledger.initialize_balance(employee, policy, today)
            if isinstance(balance, LedgerError):
                return balance
            if not await self._store.save_balance(balance):
                return LedgerError(
                    code=LedgerErrorCode.BALANCE_EXISTS,
                    message=f"Employee {employee.id} already has a leave balance",
                    employee_id=employee.id,
                )

        logger.info("Initialized leave balance for employee=%s policy=%s", employee.id, balance.policy_id)
        return balance

    async def debit(self, employee_id: uuid.UUID, category_name: str, days: Decimal | int | str) -> LedgerResult:
        """Consume leave days, e.g. when a request is approved."""
        result = await self._mutate(employee_id, lambda balance: ledger.debit(balance, category_name, days))
        if isinstance(result, LedgerError):
            logger.info("Debit rejected for employee=%s: %s", employee_id, result.code)
        return result

    async def credit(self, employee_id: uuid.UUID, category_name: str, days: Decimal | int | str) -> LedgerResult:
        """Return leave days, e.g. when an approved request is cancelled."""
        result = await self._mutate(employee_id, lambda balance: ledger.credit(balance, category_name, days))
        if isinstance(result, LedgerError):
            logger.info("Credit rejected for employee=%s: %s", employee_id, result.code)
        return result
