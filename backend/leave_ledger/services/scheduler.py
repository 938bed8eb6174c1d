"""Daily accrual batch: bootstraps missing ledgers and brings existing ones up to date."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_ledger.services import ledger
from leave_ledger.services.ledger import LedgerError

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from leave_ledger.schemas.balance import LeaveBalance
    from leave_ledger.services.employee import EmployeeService
    from leave_ledger.services.policy import LeavePolicy, PolicyService
    from leave_ledger.services.store import BalanceStore

logger = logging.getLogger(__name__)


@dataclass
class AccrualRunResult:
    """Summary of a daily accrual run."""

    today: date
    already_ran: bool = False
    processed: int = 0
    initialized: int = 0
    recomputed: int = 0
    unchanged: int = 0
    errors: int = 0
    conflicts: int = 0


@dataclass
class AccrualStats:
    """Ledger coverage for dashboards."""

    total_balances: int
    last_run_date: date | None
    current_balances: int


class _PolicyCache:
    """Memoizes policy lookups for the duration of one run."""

    def __init__(self, policies: PolicyService) -> None:
        self._policies = policies
        self._cache: dict[uuid.UUID, LeavePolicy | None] = {}

    async def get(self, policy_id: uuid.UUID) -> LeavePolicy | None:
        if policy_id not in self._cache:
            self._cache[policy_id] = await self._policies.get_policy(policy_id)
        return self._cache[policy_id]


async def run_daily_accrual(
    store: BalanceStore,
    roster: EmployeeService,
    policies: PolicyService,
    today: date,
    *,
    force: bool = False,
) -> AccrualRunResult:
    """Run the accrual batch for today.

    Skipped entirely when the run marker already covers today, unless
    ``force`` is set. Otherwise every stored ledger is recomputed and every
    active employee without a ledger gets one. Failures are isolated per
    employee: a corrupt record or a missing policy is counted and logged,
    and the rest of the roster is still processed. Changed ledgers are
    written in a single batch and the marker is then moved forward to today;
    a forced run for an earlier date leaves it where it is. Ledgers another
    writer saved first are counted as conflicts, not as initialized or
    recomputed, so the counters always add up to ``processed``.

    Re-running for the same day converges to the same ledgers, because
    recomputation is a no-op on a ledger already current and accrual is
    always derived from the hire date.
    """
    result = AccrualRunResult(today=today)

    last_run = await store.get_last_run_date()
    if not force and last_run is not None and last_run >= today:
        result.already_ran = True
        return result

    policy_cache = _PolicyCache(policies)
    changed: list[LeaveBalance] = []
    initialized_ids: set[uuid.UUID] = set()
    # Employees with any stored record, parseable or not; corrupt ones are never re-initialized.
    known_ids: set[uuid.UUID] = set()

    for stored in await store.load_all_balances():
        known_ids.add(stored.employee_id)
        result.processed += 1
        try:
            balance = ledger.parse_balance(stored.payload, stored.employee_id)
            if isinstance(balance, LedgerError):
                logger.warning("Skipping employee=%s: %s", stored.employee_id, balance.message)
                result.errors += 1
                continue

            updated = ledger.recompute_accrual(balance, await policy_cache.get(balance.policy_id), today)
            if isinstance(updated, LedgerError):
                logger.warning("Skipping employee=%s: %s", stored.employee_id, updated.message)
                result.errors += 1
            elif updated is balance:
                result.unchanged += 1
            else:
                changed.append(updated)
                result.recomputed += 1
        except Exception:
            logger.exception("Error recomputing accrual for employee=%s", stored.employee_id)
            result.errors += 1

    for employee in await roster.list_active_employees():
        if employee.id in known_ids:
            continue
        result.processed += 1
        try:
            balance = ledger.initialize_balance(employee, await policy_cache.get(employee.policy_id), today)
            if isinstance(balance, LedgerError):
                logger.warning("Cannot initialize employee=%s: %s", employee.id, balance.message)
                result.errors += 1
                continue
            changed.append(balance)
            initialized_ids.add(employee.id)
            result.initialized += 1
        except Exception:
            logger.exception("Error initializing balance for employee=%s", employee.id)
            result.errors += 1

    if changed:
        conflicts = await store.save_all_balances(changed)
        for employee_id in conflicts:
            logger.warning("Version conflict saving balance for employee=%s; left for next run", employee_id)
            if employee_id in initialized_ids:
                result.initialized -= 1
            else:
                result.recomputed -= 1
        result.conflicts = len(conflicts)

    if last_run is None or today > last_run:
        await store.set_last_run_date(today)

    logger.info(
        "Daily accrual for %s: processed=%d initialized=%d recomputed=%d unchanged=%d errors=%d conflicts=%d",
        today,
        result.processed,
        result.initialized,
        result.recomputed,
        result.unchanged,
        result.errors,
        result.conflicts,
    )
    return result


async def get_accrual_stats(store: BalanceStore, today: date) -> AccrualStats:
    """Count stored ledgers and how many are current as of today."""
    current = 0
    stored_balances = await store.load_all_balances()
    for stored in stored_balances:
        balance = ledger.parse_balance(stored.payload, stored.employee_id)
        if not isinstance(balance, LedgerError) and balance.last_accrual_date >= today:
            current += 1

    return AccrualStats(
        total_balances=len(stored_balances),
        last_run_date=await store.get_last_run_date(),
        current_balances=current,
    )
