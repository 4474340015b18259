"""FastAPI dependencies for authentication, database and services."""

import hmac
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.database import get_db
from src.models.user import User
from src.services.auth import verify_bearer_token
from src.services.notification_scheduler import NotificationScheduler
from src.services.notification_service import NotificationService
from src.services.push_client import ExpoPushClient, get_push_client

# auto_error=False so a missing header is a 401 rather than a 403
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the bearer token."""
    if credentials is None:
        raise _unauthorized("Missing or invalid authorization header")

    user = verify_bearer_token(db, credentials.credentials)
    if user is None:
        raise _unauthorized("Invalid authentication credentials")

    return user


def verify_cron_secret(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Require the shared cron secret when one is configured."""
    if not settings.cron_secret:
        return
    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode(), settings.cron_secret.encode()
    ):
        raise _unauthorized("Unauthorized")


def get_notification_service(
    db: Annotated[Session, Depends(get_db)],
    push_client: Annotated[ExpoPushClient, Depends(get_push_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> NotificationService:
    """Get notification service with dependencies."""
    return NotificationService(db, push_client=push_client, settings=settings)


def get_notification_scheduler(
    db: Annotated[Session, Depends(get_db)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> NotificationScheduler:
    """Get notification scheduler with dependencies."""
    return NotificationScheduler(db, notification_service, settings=settings)
