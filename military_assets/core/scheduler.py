from apscheduler.schedulers.asyncio import AsyncIOScheduler

from military_assets.core.config import LEDGER_AUDIT_HOUR, OVERDUE_SWEEP_HOUR
from military_assets.core.db import Database
from military_assets.services.maintenance.ledger_audit_service import (
    audit_ledger,
    find_overdue_assignments,
)


def create_scheduler(database: Database) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()

    @scheduler.scheduled_job("cron", hour=LEDGER_AUDIT_HOUR, minute=5, id="ledger_audit")
    async def ledger_audit_job():
        async with database.session() as db:
            await audit_ledger(db)

    @scheduler.scheduled_job("cron", hour=OVERDUE_SWEEP_HOUR, minute=10, id="overdue_assignments")
    async def overdue_assignments_job():
        async with database.session() as db:
            await find_overdue_assignments(db)

    return scheduler
