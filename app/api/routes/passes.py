"""
Bus Pass Routes
Pass submission for students, review for admins
"""
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_pass_store, get_pass_validity_resolver
from app.api.routes.auth import get_current_user, require_admin
from app.config import settings
from app.exceptions import (
    PassPortalError,
    PassRequestNotFoundError,
    PassSourceReadError,
    UnknownPassSourceError,
)
from app.models.pass_request import (
    PassDecision,
    PassRequest,
    PassRequestCreate,
    PassStatus,
    ProfileType,
    StudentPasses,
)
from app.models.user import User
from app.services.export import filter_by_profile_type
from app.services.notifications import notify_user
from app.services.pass_store import PassRequestStore
from app.services.pass_validity import PassValidityResolver
from app.services.timestamps import utcnow

router = APIRouter()

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_http_error(exc: PassPortalError) -> HTTPException:
    """Translate store errors into HTTP errors"""
    if isinstance(exc, (UnknownPassSourceError, PassRequestNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PassSourceReadError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/", response_model=PassRequest, status_code=status.HTTP_201_CREATED)
async def submit_pass_request(
    request_data: PassRequestCreate,
    current_user: User = Depends(get_current_user),
    store: PassRequestStore = Depends(get_pass_store),
    resolver: PassValidityResolver = Depends(get_pass_validity_resolver)
):
    """Apply for a bus pass in the general pool or a route pool"""
    source_id = request_data.route_name or settings.GENERAL_PASS_COLLECTION
    if source_id not in settings.pass_sources:
        raise HTTPException(status_code=400, detail=f"Unknown route '{source_id}'")

    if await resolver.resolve_pass_validity(current_user.user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You already hold a valid bus pass."
        )

    try:
        existing = await store.list_student_requests(current_user.user_id)
    except PassPortalError as exc:
        raise to_http_error(exc)

    if any(request.status == PassStatus.PENDING for request in existing):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You already have a pending bus pass request."
        )

    new_request = PassRequest(
        student_id=current_user.user_id,
        student_name=request_data.student_name or current_user.name,
        usn=request_data.usn or current_user.usn,
        profile_type=request_data.profile_type,
        pickup_point=request_data.pickup_point,
        route_name=request_data.route_name,
        status=PassStatus.PENDING,
        request_date=utcnow()
    )
    return await store.insert_request(source_id, new_request)


@router.get("/me", response_model=StudentPasses)
async def get_my_passes(
    current_user: User = Depends(get_current_user),
    store: PassRequestStore = Depends(get_pass_store),
    resolver: PassValidityResolver = Depends(get_pass_validity_resolver)
):
    """My requests across all routes and whether one is currently valid"""
    try:
        requests = await store.list_student_requests(current_user.user_id)
    except PassPortalError as exc:
        raise to_http_error(exc)

    requests.sort(key=lambda request: request.request_date or EPOCH, reverse=True)
    return StudentPasses(
        student_id=current_user.user_id,
        has_approved_pass=await resolver.resolve_pass_validity(current_user.user_id),
        requests=requests
    )


@router.get("/", response_model=List[PassRequest])
async def list_pass_requests(
    status: Optional[PassStatus] = None,
    profile_type: Optional[ProfileType] = None,
    admin: User = Depends(require_admin),
    store: PassRequestStore = Depends(get_pass_store)
):
    """All pass requests across every source (Admin only)"""
    try:
        requests = await store.list_all_requests(status)
    except PassPortalError as exc:
        raise to_http_error(exc)

    return filter_by_profile_type(requests, profile_type)


@router.patch("/{source_id}/{request_id}", response_model=PassRequest)
async def decide_pass_request(
    source_id: str,
    request_id: str,
    decision: PassDecision,
    admin: User = Depends(require_admin),
    store: PassRequestStore = Depends(get_pass_store)
):
    """Approve or reject a pass request (Admin only)"""
    try:
        updated = await store.decide(
            source_id,
            request_id,
            decision.status,
            decided_by=admin.user_id,
            valid_until=decision.valid_until,
            comment=decision.comment
        )
    except PassPortalError as exc:
        raise to_http_error(exc)

    await notify_user(
        updated.student_id,
        title=f"Bus Pass {updated.status.value.capitalize()}",
        message=f"Your bus pass request has been {updated.status.value}.",
        link="/epass"
    )
    return updated
