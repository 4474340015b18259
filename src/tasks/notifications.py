"""Celery task for the periodic notification sweep."""

import logging

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.database import SessionLocal
from src.services.notification_scheduler import NotificationScheduler
from src.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@celery_app.task
def process_notification_sweep() -> dict:
    """Run the scheduled, due-reminder and daily-habit sweeps once.

    Fired every minute by celery-beat, as an alternative to the HTTP cron endpoint.

    Returns:
        dict with per-sweep counts
    """
    db: Session = SessionLocal()

    try:
        scheduler = NotificationScheduler(db, NotificationService(db))
        return scheduler.run()

    except Exception as e:
        logger.error(f"Error running notification sweep: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()
