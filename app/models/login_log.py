from beanie import Document
from pydantic import Field
from datetime import datetime
from typing import Optional


class LoginLog(Document):
    """One row per established session"""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    logged_in_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "loginLogs"
        indexes = ["user_id", "logged_in_at"]
