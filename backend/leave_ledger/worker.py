"""Worker process for the daily accrual batch.

Wakes every ``accrual_interval_seconds`` and runs the batch for the current
date. The run marker makes every wake-up after the first on a given day a
cheap no-op, so the interval only bounds how late after midnight the day's
accrual lands.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_ledger.config import get_settings
from leave_ledger.db import dispose_engine, get_session_factory
from leave_ledger.services.employee import get_employee_service
from leave_ledger.services.policy import get_policy_service
from leave_ledger.services.scheduler import AccrualRunResult, run_daily_accrual
from leave_ledger.services.store import SqlBalanceStore

logger = logging.getLogger(__name__)


async def run_once(today: date | None = None) -> AccrualRunResult:
    """Run the accrual batch a single time against the configured database."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        return await run_daily_accrual(
            SqlBalanceStore(session),
            get_employee_service(),
            get_policy_service(),
            today or date.today(),
        )


async def run_accrual_loop() -> None:
    """Main worker loop."""
    interval = get_settings().accrual_interval_seconds
    logger.info("Accrual worker started (interval=%ss)", interval)

    try:
        while True:
            today = date.today()
            try:
                result = await run_once(today)
                if result.already_ran:
                    logger.debug("Accrual already ran for %s", today)
            except Exception:
                logger.exception("Accrual run failed for %s", today)

            await asyncio.sleep(interval)
    finally:
        await dispose_engine()


def main() -> None:
    """Entry point for the worker process."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(run_accrual_loop())


if __name__ == "__main__":
    main()
