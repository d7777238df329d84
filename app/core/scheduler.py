from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import SCHEDULER_TIMEZONE
from app.core.db import session_scope
from app.services.billing.invoice_service import mark_overdue_invoices
from app.utils.logger import get_logger

logger = get_logger(__name__)

# A run missed while the process was down fires once on restart, within the hour
scheduler = AsyncIOScheduler(
    timezone=SCHEDULER_TIMEZONE,
    job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 3600},
)


@scheduler.scheduled_job("cron", hour=0, minute=5, id="mark_overdue_invoices")  # daily at 00:05
async def overdue_invoices_job():
    async with session_scope() as db:
        count = await mark_overdue_invoices(db)
    logger.info("Overdue invoice job finished", extra={"marked": count})
