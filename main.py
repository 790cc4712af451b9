"""
Main FastAPI Application
Entry point for the bus pass portal backend
"""
import logging
import uuid
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app import database
from app.config import settings
from app.logging_config import setup_logging
from app.models.user import User, UserRole

# Import routers
from app.api.routes import auth, session, passes, users, notifications, export, complaints

logger = logging.getLogger("app.main")


async def ensure_default_admin() -> None:
    """Create the first admin when the database has none"""
    admin_count = await User.find(User.role == UserRole.ADMIN).count()
    if admin_count:
        return

    logger.info("No admin users found. Creating default admin %s", settings.DEFAULT_ADMIN_EMAIL)
    admin = User(
        user_id=uuid.uuid4().hex,
        name="System Admin",
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=auth.get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    await admin.insert()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s", settings.APP_NAME)

    await database.connect()
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB_NAME)
    logger.info("Pass sources: %s", ", ".join(settings.pass_sources))

    await ensure_default_admin()

    yield

    logger.info("Shutting down")
    database.close()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Campus bus pass portal: applications, approvals, notifications, complaints and exports",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(session.router, prefix="/api/session", tags=["Session"])
app.include_router(passes.router, prefix="/api/passes", tags=["Bus Passes"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])
app.include_router(complaints.router, prefix="/api/complaints", tags=["Complaints"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Campus Bus Pass Portal API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
