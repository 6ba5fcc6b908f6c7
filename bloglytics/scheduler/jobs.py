"""APScheduler jobs: purge abandoned registrations and spent password-reset tokens."""

from typing import Callable

import pytz
import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from bloglytics.config import get_settings
from bloglytics.infrastructure.database import SessionLocal
from bloglytics.application.services.auth_service import (
    purge_abandoned_registrations,
    purge_stale_reset_tokens,
)

settings = get_settings()
logger = structlog.get_logger(__name__)
tz = pytz.timezone(settings.TIMEZONE)

scheduler = AsyncIOScheduler(timezone=tz)


def purge_registrations_job(session_factory: Callable[[], Session] = SessionLocal) -> int:
    """Delete pending registrations whose code expired long ago."""
    db = session_factory()
    try:
        removed = purge_abandoned_registrations(db)
        logger.info("Abandoned registrations purged", removed=removed)
        return removed
    except Exception as e:
        db.rollback()
        logger.error("Registration purge failed", error=str(e))
        return 0
    finally:
        db.close()


def purge_reset_tokens_job(session_factory: Callable[[], Session] = SessionLocal) -> int:
    """Delete password-reset tokens that are used or expired."""
    db = session_factory()
    try:
        removed = purge_stale_reset_tokens(db)
        logger.info("Stale reset tokens purged", removed=removed)
        return removed
    except Exception as e:
        db.rollback()
        logger.error("Reset token purge failed", error=str(e))
        return 0
    finally:
        db.close()


def start_scheduler():
    """Start the APScheduler with both maintenance jobs."""
    scheduler.add_job(
        purge_registrations_job,
        trigger=IntervalTrigger(minutes=15, timezone=tz),
        id="purge_pending_registrations",
        name="Purge abandoned registrations (every 15 mins)",
        replace_existing=True,
    )

    scheduler.add_job(
        purge_reset_tokens_job,
        trigger=IntervalTrigger(hours=1, timezone=tz),
        id="purge_reset_tokens",
        name="Purge stale reset tokens (hourly)",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started", timezone=settings.TIMEZONE)


def stop_scheduler():
    """Stop the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
