"""
View Router
Role-based navigation: maps a session and a requested path to the view the
client should render, or to a redirect.
"""
from typing import Dict, Optional

from pydantic import BaseModel

from app.models.user import UserRole
from app.services.session import SessionState


class RouteDecision(BaseModel):
    path: str
    view: Optional[str] = None
    redirect: Optional[str] = None


STUDENT_VIEWS: Dict[str, str] = {
    "/home": "home",
    "/tracking": "tracking",
    "/notifications": "user_notifications",
    "/contact": "contact",
}

ADMIN_VIEWS: Dict[str, str] = {
    "/admin/requests": "admin_requests",
    "/admin/users/students": "admin_users_students",
    "/admin/users/teachers": "admin_users_teachers",
    "/admin/logins": "admin_logins",
    "/admin/all-data": "all_data",
    "/admin/notifications": "admin_notifications",
    "/admin/complaints": "admin_complaints",
}

ADMIN_REDIRECTS: Dict[str, str] = {
    "/": "/admin/requests",
    "/admin": "/admin/requests",
    "/admin/users": "/admin/users/students",
}


def _normalize(path: str) -> str:
    path = "/" + (path or "").strip().strip("/")
    return path


def _view(path: str, view: str) -> RouteDecision:
    return RouteDecision(path=path, view=view)


def _redirect(path: str, target: str) -> RouteDecision:
    return RouteDecision(path=path, redirect=target)


def _student_route(path: str, has_approved_pass: bool) -> RouteDecision:
    if path == "/":
        return _redirect(path, "/epass")
    if path == "/epass":
        return _view(path, "student_bus_pass" if has_approved_pass else "bus_pass_request_form")
    if path == "/apply":
        if has_approved_pass:
            return _redirect(path, "/epass")
        return _view(path, "bus_pass_request_form")
    if path in STUDENT_VIEWS:
        return _view(path, STUDENT_VIEWS[path])
    if path == "/admin" or path.startswith("/admin/"):
        return _view(path, "access_denied")
    return _view(path, "not_found")


def _admin_route(path: str) -> RouteDecision:
    if path in ADMIN_REDIRECTS:
        return _redirect(path, ADMIN_REDIRECTS[path])
    if path in ADMIN_VIEWS:
        return _view(path, ADMIN_VIEWS[path])
    return _view(path, "not_found")


def _teacher_route(path: str) -> RouteDecision:
    if path == "/home":
        return _view(path, "home")
    return _redirect(path, "/home")


def _anonymous_route(path: str) -> RouteDecision:
    if path == "/":
        return _view(path, "login")
    if path == "/home":
        return _view(path, "home")
    return _redirect(path, "/")


def resolve_view(session: Optional[SessionState], path: str) -> RouteDecision:
    """Decide what `path` shows for `session` (None when not signed in)"""
    path = _normalize(path)

    if session is None:
        return _anonymous_route(path)
    if session.role is None:
        return _view(path, "loading")
    if session.role == UserRole.STUDENT:
        return _student_route(path, session.has_approved_pass)
    if session.role == UserRole.ADMIN:
        return _admin_route(path)
    return _teacher_route(path)
