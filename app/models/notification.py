from beanie import Document
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from enum import Enum

BROADCAST_RECIPIENT = "all"


class NotificationActionType(str, Enum):
    READ = "read"
    DELETED = "deleted"


class Notification(Document):
    title: str
    message: str
    user_id: str = BROADCAST_RECIPIENT
    status: str = "new"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    link: Optional[str] = None

    class Settings:
        name = "notifications"
        indexes = ["user_id", "created_at"]


class NotificationAction(Document):
    """Per-user read/hide state of a notification, one document per pair"""
    user_id: str
    notification_id: str
    action: NotificationActionType
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "userNotificationActions"
        indexes = ["user_id"]


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    user_id: str = BROADCAST_RECIPIENT
    link: Optional[str] = None


class FeedItem(BaseModel):
    id: str
    title: str
    message: str
    user_id: str = BROADCAST_RECIPIENT
    status: Optional[str] = "new"
    created_at: Optional[datetime] = None
    link: Optional[str] = None
    is_read: bool = False


class NotificationFeed(BaseModel):
    unread_count: int
    items: List[FeedItem]
