from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from leave_ledger.db import SessionDep
from leave_ledger.services.balance import LeaveLedgerService
from leave_ledger.services.employee import EmployeeService, get_employee_service
from leave_ledger.services.policy import PolicyService, get_policy_service
from leave_ledger.services.store import BalanceStore, SqlBalanceStore


async def get_balance_store(session: SessionDep) -> BalanceStore:
    """Ledger store bound to the request's database session."""
    return SqlBalanceStore(session)


StoreDep = Annotated[BalanceStore, Depends(get_balance_store)]
RosterDep = Annotated[EmployeeService, Depends(get_employee_service)]
PoliciesDep = Annotated[PolicyService, Depends(get_policy_service)]


async def get_ledger_service(store: StoreDep) -> LeaveLedgerService:
    """Ledger service for the request.

    Services share per-employee locks within the process; writes from other
    processes are caught by the store's version check.
    """
    return LeaveLedgerService(store)


LedgerServiceDep = Annotated[LeaveLedgerService, Depends(get_ledger_service)]
