"""
Session Routes
Role and pass validity for the signed-in user, plus view routing
"""
from fastapi import APIRouter, Depends

from app.api.dependencies import get_session_controller
from app.api.routes.auth import get_current_user
from app.models.user import User
from app.services.session import SessionController, SessionState
from app.services.view_router import RouteDecision, resolve_view

router = APIRouter()


@router.get("/", response_model=SessionState)
async def get_session(
    current_user: User = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller)
):
    """Establish the session: role and whether a valid pass is held"""
    return await controller.establish_session(current_user.user_id)


@router.get("/view", response_model=RouteDecision)
async def get_view(
    path: str = "/",
    current_user: User = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller)
):
    """Which view `path` renders for this session, or where it redirects"""
    session = await controller.establish_session(current_user.user_id, record_login=False)
    return resolve_view(session, path)
