from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # JWT Configuration
    JWT_SECRET_KEY: str = "your-super-secret-jwt-key-here-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60

    # Frontend
    FRONTEND_URL: str = "http://localhost:8080"
    FRONTEND_URL_8081: str = "http://localhost:8000"

    # Mock data source, loaded once at startup
    SEED_MOCK_DATA: bool = True
    MOCK_DATA_SEED: Optional[int] = None

    # Dashboard and report defaults
    FOLLOW_UP_DISPLAY_COUNT: int = 5
    RECENT_INTERACTIONS_COUNT: int = 5
    REPORT_DEFAULT_DAYS: int = 30

    # Development
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra environment variables

settings = Settings()
