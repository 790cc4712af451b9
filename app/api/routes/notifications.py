"""
Notification Routes
Admin broadcasts and the per-user feed with read/hide tracking
"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from app.api.routes.auth import get_current_user, require_admin
from app.models.notification import (
    BROADCAST_RECIPIENT,
    Notification,
    NotificationActionType,
    NotificationCreate,
    NotificationFeed,
)
from app.models.user import User
from app.services.notifications import load_feed, set_action

router = APIRouter()


@router.post("/", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def send_notification(
    data: NotificationCreate,
    admin: User = Depends(require_admin)
):
    """Broadcast to everyone, or target one user (Admin only)"""
    notification = Notification(**data.model_dump())
    await notification.insert()
    return notification


@router.get("/all", response_model=List[Notification])
async def list_sent_notifications(admin: User = Depends(require_admin)):
    """Every notification, newest first (Admin only)"""
    return await Notification.find().sort("-created_at").to_list()


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    admin: User = Depends(require_admin)
):
    """Delete a notification for everyone (Admin only)"""
    notification = await Notification.get(notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    await notification.delete()
    return {"message": "Notification deleted"}


@router.get("/", response_model=NotificationFeed)
async def get_my_notifications(current_user: User = Depends(get_current_user)):
    """Broadcasts and notifications addressed to me, with unread count"""
    return await load_feed(current_user.user_id)


async def _visible_notification(notification_id: str, user: User) -> Notification:
    notification = await Notification.get(notification_id)
    if not notification or notification.user_id not in (BROADCAST_RECIPIENT, user.user_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.put("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user)
):
    """Mark a notification as read"""
    await _visible_notification(notification_id, current_user)
    await set_action(current_user.user_id, notification_id, NotificationActionType.READ)
    return {"message": "Notification marked as read"}


@router.put("/{notification_id}/hide")
async def hide_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user)
):
    """Remove a notification from my feed only"""
    await _visible_notification(notification_id, current_user)
    await set_action(current_user.user_id, notification_id, NotificationActionType.DELETED)
    return {"message": "Notification removed"}
