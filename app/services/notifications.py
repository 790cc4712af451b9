"""
Notification Service
Targeted notifications and the per-user feed built from shared broadcasts
"""
from datetime import datetime
from typing import Dict, Iterable, Optional

from app.models.notification import (
    BROADCAST_RECIPIENT,
    FeedItem,
    Notification,
    NotificationAction,
    NotificationActionType,
    NotificationFeed,
)


async def notify_user(user_id: str, title: str, message: str, link: Optional[str] = None) -> Notification:
    notification = Notification(user_id=user_id, title=title, message=message, link=link)
    await notification.insert()
    return notification


def build_feed(
    items: Iterable[FeedItem],
    actions: Dict[str, NotificationActionType],
) -> NotificationFeed:
    """
    Apply a user's actions to the notifications visible to them.

    Hidden notifications are dropped; a notification is unread until the
    user marks it read, and only while its status is still new.
    """
    visible = []
    unread = 0
    for item in items:
        action = actions.get(item.id)
        if action == NotificationActionType.DELETED:
            continue
        is_read = action == NotificationActionType.READ
        if not is_read and (not item.status or item.status == "new"):
            unread += 1
        visible.append(item.model_copy(update={"is_read": is_read}))
    return NotificationFeed(unread_count=unread, items=visible)


async def load_feed(user_id: str, limit: int = 50) -> NotificationFeed:
    notifications = await Notification.find(
        {"user_id": {"$in": [user_id, BROADCAST_RECIPIENT]}}
    ).sort("-created_at").limit(limit).to_list()

    user_actions = await NotificationAction.find(NotificationAction.user_id == user_id).to_list()
    actions = {action.notification_id: action.action for action in user_actions}

    items = [
        FeedItem(
            id=str(notification.id),
            title=notification.title,
            message=notification.message,
            user_id=notification.user_id,
            status=notification.status,
            created_at=notification.created_at,
            link=notification.link,
        )
        for notification in notifications
    ]
    return build_feed(items, actions)


async def set_action(user_id: str, notification_id: str, action: NotificationActionType) -> NotificationAction:
    """Record the latest action of a user on a notification"""
    existing = await NotificationAction.find_one(
        NotificationAction.user_id == user_id,
        NotificationAction.notification_id == notification_id,
    )
    if existing:
        existing.action = action
        existing.timestamp = datetime.utcnow()
        await existing.save()
        return existing

    record = NotificationAction(user_id=user_id, notification_id=notification_id, action=action)
    await record.insert()
    return record
