"""
Application Configuration
Loads and validates environment variables
"""
import os
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Campus Bus Pass Portal"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URL: str = os.getenv("DB_URL", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = "bus_pass_portal"

    # JWT
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Default admin (seeded when no admin exists)
    DEFAULT_ADMIN_EMAIL: str = "admin@campusbus.edu"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001"
    CORS_ALLOW_CREDENTIALS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Pass sources: one general pool plus ROUTE_COUNT route pools
    GENERAL_PASS_COLLECTION: str = "busPassRequests"
    ROUTE_COLLECTION_PREFIX: str = "route-"
    ROUTE_COUNT: int = 12

    # Pass validity
    PASS_SOURCE_TIMEOUT_SECONDS: float = 10.0
    PASS_VALIDITY_DAYS: int = 365

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS origins string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def route_collections(self) -> List[str]:
        """Route-scoped pass collections, route-1 .. route-N"""
        return [f"{self.ROUTE_COLLECTION_PREFIX}{n}" for n in range(1, self.ROUTE_COUNT + 1)]

    @property
    def pass_sources(self) -> List[str]:
        """Every collection a pass request may live in, general pool first"""
        return [self.GENERAL_PASS_COLLECTION] + self.route_collections

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
