"""Notification API endpoints for devices, settings and scheduled notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_current_user, get_notification_service
from src.models.enums import ScheduledNotificationStatus
from src.models.user import User
from src.schemas.notification import (
    DeviceListResponse,
    DeviceRegister,
    DeviceTokenResponse,
    DeviceUnregister,
    MessageResponse,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ScheduledNotificationCreate,
    ScheduledNotificationResponse,
)
from src.services.exceptions import (
    InvalidStateTransitionError,
    ScheduledNotificationNotFoundError,
    UserNotFoundError,
)
from src.services.notification_service import NotificationService

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("/devices", response_model=DeviceListResponse)
async def list_devices(
    service: NotificationServiceDep,
    current_user: CurrentUser,
) -> DeviceListResponse:
    """Get all active devices for the current user."""
    devices = service.list_active_devices(current_user.id)
    return DeviceListResponse(
        devices=[DeviceTokenResponse.model_validate(device) for device in devices]
    )


@router.post(
    "/devices",
    response_model=DeviceTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_device(
    device: DeviceRegister,
    service: NotificationServiceDep,
    current_user: CurrentUser,
):
    """Register a device for push notifications."""
    return service.register_device(
        current_user.id,
        push_token=device.push_token,
        platform=device.platform,
        device_name=device.device_name,
    )


@router.delete("/devices", response_model=MessageResponse)
async def unregister_device(
    device: DeviceUnregister,
    service: NotificationServiceDep,
    current_user: CurrentUser,
) -> MessageResponse:
    """Unregister a device from push notifications."""
    if service.unregister_device(current_user.id, device.push_token):
        return MessageResponse(message="Device unregistered")
    return MessageResponse(message="Device not found")


@router.get("/settings", response_model=NotificationSettingsResponse)
async def get_notification_settings(
    service: NotificationServiceDep,
    current_user: CurrentUser,
):
    """Get notification settings for the current user."""
    try:
        return service.get_settings(current_user.id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/settings", response_model=NotificationSettingsResponse)
async def update_notification_settings(
    settings_update: NotificationSettingsUpdate,
    service: NotificationServiceDep,
    current_user: CurrentUser,
):
    """Update notification settings for the current user."""
    changes = settings_update.model_dump(exclude_unset=True, by_alias=True)
    try:
        return service.update_settings(current_user.id, changes)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post(
    "/scheduled",
    response_model=ScheduledNotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def schedule_notification(
    notification: ScheduledNotificationCreate,
    service: NotificationServiceDep,
    current_user: CurrentUser,
):
    """Schedule a notification for later delivery."""
    return service.schedule_notification(
        current_user.id,
        category=notification.category,
        title=notification.title,
        body=notification.body,
        reference_id=notification.reference_id,
        scheduled_for=notification.scheduled_for,
    )


@router.get("/scheduled", response_model=list[ScheduledNotificationResponse])
async def list_scheduled_notifications(
    service: NotificationServiceDep,
    current_user: CurrentUser,
    status_filter: Annotated[ScheduledNotificationStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """List the current user's scheduled notifications, soonest first."""
    return service.list_scheduled(current_user.id, status=status_filter, limit=limit, offset=offset)


@router.post("/scheduled/{notification_id}/cancel", response_model=ScheduledNotificationResponse)
async def cancel_scheduled_notification(
    notification_id: int,
    service: NotificationServiceDep,
    current_user: CurrentUser,
):
    """Cancel a scheduled notification that has not been processed yet."""
    try:
        return service.cancel_scheduled(current_user.id, notification_id)
    except ScheduledNotificationNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Scheduled notification not found"
        ) from e
    except InvalidStateTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
