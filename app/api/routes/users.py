"""
User Management Routes
Admin listing, editing and removal of users, and the login log
"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional

from app.api.routes.auth import require_admin
from app.models.login_log import LoginLog
from app.models.user import User, UserResponse, UserRole, UserUpdate

router = APIRouter()


@router.get("/", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    admin: User = Depends(require_admin)
):
    """List users, optionally filtered by role (Admin only)"""
    query = {}
    if role:
        query["role"] = role.value
    return await User.find(query).sort("name").to_list()


@router.get("/logins", response_model=List[LoginLog])
async def list_logins(
    limit: int = 100,
    admin: User = Depends(require_admin)
):
    """Most recent logins first (Admin only)"""
    return await LoginLog.find().sort("-logged_in_at").limit(limit).to_list()


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    admin: User = Depends(require_admin)
):
    """Edit a user's profile or role (Admin only)"""
    user = await User.find_one(User.user_id == user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    changes = update_data.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] != user.email:
        taken = await User.find_one(User.email == changes["email"])
        if taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

    for field, value in changes.items():
        setattr(user, field, value)
    await user.save()
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin)
):
    """Delete a user (Admin only)"""
    if user_id == admin.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot delete their own account"
        )

    user = await User.find_one(User.user_id == user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    await user.delete()
    return {"message": "User deleted successfully"}
