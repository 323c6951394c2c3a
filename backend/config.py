# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_sportshop.db"

    # Signed cookie holding the guest session (guest cart, guest orders)
    SESSION_SECRET_KEY: str = "dev-session-secret-change-me"
    SESSION_MAX_AGE: int = 14 * 24 * 60 * 60

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Account created by populate_db.py
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin123"

settings = Settings()
