from fastapi import APIRouter

from leave_ledger.api.accruals import accruals_router
from leave_ledger.api.balances import balance_router, balances_router

api_router = APIRouter()
api_router.include_router(balance_router)
api_router.include_router(balances_router)
api_router.include_router(accruals_router)
