"""
User Model
Database schema for portal users (students, teachers, admins)
"""
from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from beanie import Document


class UserRole(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(Document):
    """User document model"""

    user_id: str = Field(..., index=True)
    name: str
    email: EmailStr = Field(..., index=True)
    password_hash: str
    role: UserRole = UserRole.STUDENT

    usn: Optional[str] = None  # university seat number, students only
    phone: Optional[str] = None
    department: Optional[str] = None

    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"
        indexes = [
            "user_id",
            "email",
            "role",
        ]


class UserCreate(BaseModel):
    """Schema for self-registration"""
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.STUDENT
    usn: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for admin edits"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    usn: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    """Public slice of a user"""
    user_id: str
    name: str
    email: EmailStr
    role: UserRole
    usn: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True
