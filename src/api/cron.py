"""Cron trigger endpoint for the notification sweep."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_notification_scheduler, verify_cron_secret
from src.schemas.notification import CronRunResponse
from src.services.notification_scheduler import NotificationScheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cron", tags=["cron"])


@router.get(
    "/notifications",
    response_model=CronRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
def run_notification_sweep(
    scheduler: Annotated[NotificationScheduler, Depends(get_notification_scheduler)],
):
    """Process scheduled notifications, due reminders and daily habit reminders.

    Meant to be called about once a minute by an external cron service.
    """
    now = datetime.now(UTC)
    try:
        results = scheduler.run(now)
    except Exception as e:
        logger.error(f"Cron job error: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Cron job failed"},
        )

    return CronRunResponse(success=True, results=results, timestamp=now)
