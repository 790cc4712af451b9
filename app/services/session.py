"""
Session Controller
Builds the session state a client needs after authentication: the user's
role and, for students, whether they currently hold a valid bus pass.
"""
import logging
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from app.models.login_log import LoginLog
from app.models.user import User, UserRole
from app.services.pass_validity import PassValidityResolver

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[str], Awaitable[Optional[User]]]
LoginRecorder = Callable[[User], Awaitable[None]]


class SessionState(BaseModel):
    user_id: str
    role: Optional[UserRole] = None
    has_approved_pass: bool = False


async def load_user_profile(user_id: str) -> Optional[User]:
    return await User.find_one(User.user_id == user_id)


async def append_login_log(profile: User) -> None:
    """Append a login log entry for an established session"""
    await LoginLog(
        user_id=profile.user_id,
        email=profile.email,
        name=profile.name,
        role=profile.role.value if profile.role else None,
    ).insert()


class SessionController:
    """
    Resolves role and pass validity for a user.

    A missing profile means a student without a pass. Failing to load the
    profile yields no role at all; failing to record the login is only
    logged.
    """

    def __init__(
        self,
        resolver: PassValidityResolver,
        profile_loader: ProfileLoader = load_user_profile,
        login_recorder: Optional[LoginRecorder] = append_login_log,
    ):
        self.resolver = resolver
        self.profile_loader = profile_loader
        self.login_recorder = login_recorder

    async def establish_session(self, user_id: str, record_login: bool = True) -> SessionState:
        """
        Role and pass validity for `user_id`.

        Only a sign-in records a login; lookups that merely need the
        session, such as view routing, pass `record_login=False`.
        """
        try:
            profile = await self.profile_loader(user_id)
        except Exception as exc:
            logger.error("Error fetching profile for user %s: %s", user_id, exc)
            return SessionState(user_id=user_id, role=None, has_approved_pass=False)

        if profile is None:
            return SessionState(user_id=user_id, role=UserRole.STUDENT, has_approved_pass=False)

        role = UserRole(profile.role or UserRole.STUDENT)

        if record_login and self.login_recorder is not None:
            try:
                await self.login_recorder(profile)
            except Exception as exc:
                logger.warning("Login log for user %s failed: %s", user_id, exc)

        has_approved_pass = False
        if role == UserRole.STUDENT:
            has_approved_pass = await self.resolver.resolve_pass_validity(user_id)

        return SessionState(user_id=user_id, role=role, has_approved_pass=has_approved_pass)
