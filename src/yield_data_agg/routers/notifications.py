"""Per-user notification routes."""
from typing import Annotated

from fastapi import APIRouter, Query

from yield_data_agg.db import Notification
from yield_data_agg.deps import CurrentUserId, NotificationRepositoryDep
from yield_data_agg.errors import ErrorMapper, PersistenceUnavailable
from yield_data_agg.schemas import AffectedCount, UnreadCount

router = APIRouter(prefix="/notifications", tags=["notifications"])

errors = ErrorMapper(resource_name="Notification", api_name="Notifications")


@router.get("", response_model=list[Notification])
def list_notifications(
    user_id: CurrentUserId,
    notifications: NotificationRepositoryDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[Notification]:
    """The caller's notifications, newest first."""
    try:
        return notifications.list_for_user(user_id, limit=limit)
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    user_id: CurrentUserId, notifications: NotificationRepositoryDep
) -> UnreadCount:
    try:
        return UnreadCount(count=notifications.unread_count(user_id))
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.post("/read-all", response_model=AffectedCount)
def mark_all_read(
    user_id: CurrentUserId, notifications: NotificationRepositoryDep
) -> AffectedCount:
    try:
        return AffectedCount(count=notifications.mark_all_read(user_id))
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.delete("/clear-read", response_model=AffectedCount)
def clear_read(
    user_id: CurrentUserId, notifications: NotificationRepositoryDep
) -> AffectedCount:
    """Delete every notification the caller has already read."""
    try:
        return AffectedCount(count=notifications.clear_read(user_id))
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.post("/{notification_id}/read", response_model=Notification)
def mark_read(
    notification_id: int, user_id: CurrentUserId, notifications: NotificationRepositoryDep
) -> Notification:
    try:
        return notifications.mark_read(user_id, notification_id)
    except (LookupError, PersistenceUnavailable) as exc:
        errors.raise_http(exc, key=notification_id)


@router.delete("/{notification_id}", response_model=AffectedCount)
def delete_notification(
    notification_id: int, user_id: CurrentUserId, notifications: NotificationRepositoryDep
) -> AffectedCount:
    try:
        notifications.delete(user_id, notification_id)
    except (LookupError, PersistenceUnavailable) as exc:
        errors.raise_http(exc, key=notification_id)
    return AffectedCount(count=1)
