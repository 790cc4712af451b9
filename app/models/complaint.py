"""
Complaint Model
Feedback raised by students and teachers, worked through by admins
"""
from datetime import datetime
from typing import Any, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from beanie import Document


class ComplaintStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class Complaint(Document):
    """Complaint document model"""

    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    message: str
    status: ComplaintStatus = ComplaintStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "complaints"
        indexes = ["created_at", "status"]


class ComplaintCreate(BaseModel):
    """Schema for raising a complaint; name and email default to the sender's profile"""
    message: str = Field(..., min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Complaint message cannot be empty")
        return value


class ComplaintUpdate(BaseModel):
    """Schema for admin edits"""
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ComplaintStatus] = None


class ComplaintResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    message: str
    status: ComplaintStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    class Config:
        from_attributes = True
