"""
Scheduled session cleanup

Periodically hard-deletes expired and revoked sessions. Runs as a recurring
APScheduler job on the application's event loop.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.sessions import SessionManagementService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "session_cleanup"

scheduler = AsyncIOScheduler()


async def run_session_cleanup(session_factory, timeout: float) -> int:
    """
    One cleanup sweep on its own database session.

    Returns the number of deleted rows, 0 when the store was unavailable.
    """
    async with session_factory() as db:
        service = SessionManagementService(SqlAlchemyUnitOfWork(db, timeout))
        result = await service.cleanup_expired_sessions()

    if result.is_err():
        logger.warning(f"Scheduled session cleanup skipped: {result.error.code}")
        return 0
    return result.value.total_deleted


def install_session_cleanup(
    scheduler, session_factory, interval_minutes: int, timeout: float
) -> bool:
    """Register the cleanup job; an interval of 0 disables it"""
    if interval_minutes <= 0:
        logger.info("session_cleanup: disabled")
        return False

    scheduler.add_job(
        run_session_cleanup,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=[session_factory, timeout],
        id=CLEANUP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"session_cleanup: installed (interval={interval_minutes}m)")
    return True
