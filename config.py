"""
Configuration management for MedTrack
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "MedTrack"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./medtrack.db"
    DATABASE_ECHO: bool = False

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Webhook (schedule creation notifications)
    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_TIMEOUT: float = 10.0
    WEBHOOK_SOURCE: str = "BeomMed System"

    # Query caps
    RECORD_QUERY_LIMIT: int = 500
    DASHBOARD_RECORD_LIMIT: int = 200
    LIVE_QUERY_LIMIT: int = 500
    UPCOMING_GENERATION_DAYS: int = 7

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class TrackingConfig:
    """Configuration for compliance aggregation"""

    DAILY_WINDOW_DAYS: int = 7
    MONTHLY_WINDOW_MONTHS: int = 6
    RECENT_ACTIVITY_COUNT: int = 10

    # Keyword -> category, first match wins
    MEDICATION_CATEGORIES: list[tuple[str, list[str]]] = [
        ("Antihypertensive", ["amlodipine", "captopril"]),
        ("Antidiabetic", ["metformin", "insulin"]),
        ("Antibiotic", ["amoxicillin", "antibiotic"]),
        ("Analgesic", ["paracetamol", "ibuprofen"]),
        ("Vitamin", ["vitamin"]),
    ]
    DEFAULT_CATEGORY: str = "Other"


# Collection (table) names
class CollectionNames:
    USERS = "users"
    DOCTORS = "doctors"
    PATIENTS = "patients"
    MEDICATION_SCHEDULES = "medication_schedules"
    CONSUMPTION_RECORDS = "consumption_records"
    REVOKED_TOKENS = "revoked_tokens"


settings = get_settings()
tracking_config = TrackingConfig()
