from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Environment
    DEV_MODE: bool = True  # Set to False in production
    FRONTEND_URL: str = "http://localhost:5173"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./metahire.db"
    SQL_ECHO: bool = False
    RECREATE_TABLES: bool = False  # WARNING: drops all data on startup
    STORAGE_BACKEND: str = "sql"  # sql, memory

    # JWT Settings
    SECRET_KEY: str = "supersecretkey"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # API Settings
    API_PREFIX: str = "/api"

    # Billing
    DEFAULT_CURRENCY: str = "USD"

    # CSV import
    IMPORT_BATCH_SIZE: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text, json

    # Bootstrap superadmin (created on startup when missing)
    SUPERADMIN_EMAIL: Optional[str] = None
    SUPERADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"

settings = Settings()
