"""
Database Handles
Motor client shared by Beanie models and the pass request collections
"""
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.config import settings
from app.models.user import User
from app.models.notification import Notification, NotificationAction
from app.models.login_log import LoginLog
from app.models.complaint import Complaint

DOCUMENT_MODELS = [User, Notification, NotificationAction, LoginLog, Complaint]

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect() -> AsyncIOMotorDatabase:
    """Open the MongoDB connection and register document models"""
    global _client, _database

    _client = AsyncIOMotorClient(settings.MONGODB_URL)
    _database = _client[settings.MONGODB_DB_NAME]

    await init_beanie(database=_database, document_models=DOCUMENT_MODELS)
    return _database


def close() -> None:
    global _client, _database
    if _client is not None:
        _client.close()
    _client = None
    _database = None


def get_database() -> AsyncIOMotorDatabase:
    """Current database handle; only valid between connect() and close()"""
    if _database is None:
        raise RuntimeError("Database is not connected")
    return _database
