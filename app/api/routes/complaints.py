"""
Complaint Routes
Any signed-in user can raise a complaint; admins review, edit and delete them
"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional

from app.api.routes.auth import get_current_user, require_admin
from app.models.complaint import ComplaintCreate, ComplaintResponse, ComplaintStatus, ComplaintUpdate
from app.models.user import User
from app.services.complaints import delete_complaint, list_complaints, submit_complaint, update_complaint

router = APIRouter()


@router.post("/", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def raise_complaint(
    data: ComplaintCreate,
    current_user: User = Depends(get_current_user)
):
    """Raise a complaint about the bus service"""
    return await submit_complaint(data, current_user)


@router.get("/", response_model=List[ComplaintResponse])
async def get_complaints(
    status: Optional[ComplaintStatus] = None,
    admin: User = Depends(require_admin)
):
    """All complaints, newest first (Admin only)"""
    return await list_complaints(status)


@router.put("/{complaint_id}", response_model=ComplaintResponse)
async def edit_complaint(
    complaint_id: str,
    changes: ComplaintUpdate,
    admin: User = Depends(require_admin)
):
    """Edit a complaint or move it through its statuses (Admin only)"""
    complaint = await update_complaint(complaint_id, changes)
    if complaint is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")
    return complaint


@router.delete("/{complaint_id}")
async def remove_complaint(
    complaint_id: str,
    admin: User = Depends(require_admin)
):
    """Delete a complaint (Admin only)"""
    if not await delete_complaint(complaint_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")
    return {"message": "Complaint deleted successfully"}
