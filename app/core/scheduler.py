import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.exam_session import exam_session_service

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def sweep_expired_sessions() -> int:
    """Finalize sessions whose deadline passed without the client submitting."""
    db = SessionLocal()
    try:
        return exam_session_service.expire_overdue_sessions(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Error sweeping expired sessions: {e}", exc_info=True)
        return 0
    finally:
        db.close()


def start_scheduler():
    if os.getenv("TESTING") == "true" or not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            sweep_expired_sessions,
            'interval',
            seconds=settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
            id='expire_overdue_sessions',
            name='Finalize sessions past their deadline',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        scheduler.start()
        logger.info(f"Scheduler started; expiry sweep every {settings.EXPIRY_SWEEP_INTERVAL_SECONDS}s")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
