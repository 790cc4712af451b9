"""
Complaint Service
Beanie access to the complaints collection
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from beanie import PydanticObjectId

from app.models.complaint import Complaint, ComplaintCreate, ComplaintStatus, ComplaintUpdate


def complaint_fields(data: ComplaintCreate, sender) -> Dict[str, Any]:
    """Document fields for a new complaint, filling contact details from the sender"""
    return {
        "user_id": sender.user_id,
        "name": data.name or sender.name,
        "email": data.email or sender.email,
        "message": data.message,
        "status": ComplaintStatus.PENDING,
    }


async def submit_complaint(data: ComplaintCreate, sender) -> Complaint:
    complaint = Complaint(**complaint_fields(data, sender))
    await complaint.insert()
    return complaint


async def list_complaints(status: Optional[ComplaintStatus] = None) -> List[Complaint]:
    """Newest first"""
    query = {}
    if status:
        query["status"] = status.value
    return await Complaint.find(query).sort("-created_at").to_list()


async def get_complaint(complaint_id: str) -> Optional[Complaint]:
    if not PydanticObjectId.is_valid(complaint_id):
        return None
    return await Complaint.get(PydanticObjectId(complaint_id))


async def update_complaint(complaint_id: str, changes: ComplaintUpdate) -> Optional[Complaint]:
    complaint = await get_complaint(complaint_id)
    if complaint is None:
        return None

    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(complaint, field, value)
    complaint.updated_at = datetime.utcnow()
    await complaint.save()
    return complaint


async def delete_complaint(complaint_id: str) -> bool:
    complaint = await get_complaint(complaint_id)
    if complaint is None:
        return False

    await complaint.delete()
    return True
