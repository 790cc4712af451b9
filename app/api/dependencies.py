"""
Route Dependencies
Request-scoped construction of the pass store, resolver and session controller
"""
from datetime import timedelta

from fastapi import Depends

from app.config import settings
from app.database import get_database
from app.services.pass_store import PassRequestStore
from app.services.pass_validity import PassValidityResolver
from app.services.session import SessionController


def get_pass_store() -> PassRequestStore:
    """Store over every configured pass source"""
    return PassRequestStore(get_database(), settings.pass_sources)


def get_pass_validity_resolver(
    store: PassRequestStore = Depends(get_pass_store),
) -> PassValidityResolver:
    return PassValidityResolver(
        store,
        settings.pass_sources,
        source_timeout=settings.PASS_SOURCE_TIMEOUT_SECONDS,
        validity_period=timedelta(days=settings.PASS_VALIDITY_DAYS),
    )


def get_session_controller(
    resolver: PassValidityResolver = Depends(get_pass_validity_resolver),
) -> SessionController:
    return SessionController(resolver)
