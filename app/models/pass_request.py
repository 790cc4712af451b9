"""
Pass Request Model
Schema for bus pass requests stored across the general and route collections
"""
from datetime import datetime
from typing import Any, List, Optional
from enum import Enum

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.services.timestamps import parse_timestamp


class PassStatus(str, Enum):
    """Pass request status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProfileType(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


class PassRequest(BaseModel):
    """
    A bus pass request.

    Not a Beanie document: the same shape lives in one general collection
    plus one collection per route, so it is read and written through
    `PassRequestStore`. Stored keys are camelCase.
    """
    id: Optional[str] = Field(default=None, alias="_id")
    student_id: str
    status: PassStatus = PassStatus.PENDING

    student_name: Optional[str] = None
    usn: Optional[str] = None
    profile_type: ProfileType = ProfileType.STUDENT
    pickup_point: Optional[str] = None
    route_name: Optional[str] = None

    request_date: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    decided_by: Optional[str] = None
    admin_comment: Optional[str] = None

    # Which collection the record was read from; never stored
    source_collection: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_object_id(cls, value: Any) -> Optional[str]:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @field_validator("request_date", "approved_at", "valid_until", mode="before")
    @classmethod
    def normalize_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("profile_type", mode="before")
    @classmethod
    def default_profile_type(cls, value: Any) -> Any:
        return value or ProfileType.STUDENT

    def to_document(self) -> dict:
        """Document body for MongoDB, without the id and source tag"""
        document = self.model_dump(
            by_alias=True,
            exclude={"id", "source_collection"},
            exclude_none=True,
        )
        for key, value in document.items():
            if isinstance(value, Enum):
                document[key] = value.value
        return document

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PassRequestCreate(BaseModel):
    """Schema for submitting a pass request"""
    route_name: Optional[str] = None  # route collection, e.g. "route-5"; general pool when omitted
    student_name: Optional[str] = None
    usn: Optional[str] = None
    profile_type: ProfileType = ProfileType.STUDENT
    pickup_point: Optional[str] = None


class PassDecision(BaseModel):
    """Schema for approving/rejecting a pass request"""
    status: PassStatus
    valid_until: Optional[datetime] = None
    comment: Optional[str] = None

    @field_validator("status")
    @classmethod
    def must_be_final(cls, value: PassStatus) -> PassStatus:
        if value == PassStatus.PENDING:
            raise ValueError("Decision must be 'approved' or 'rejected'")
        return value


class StudentPasses(BaseModel):
    """A student's requests together with the resolved validity"""
    student_id: str
    has_approved_pass: bool
    requests: List[PassRequest]
