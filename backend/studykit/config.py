"""Application configuration and environment variables"""
from pydantic_settings import BaseSettings
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    PORT: int = 5000

    # MongoDB Configuration
    # Leave MONGODB_URI empty to run against a process-local mongomock store
    MONGODB_URI: str = ""
    DB_NAME: str = "student_life_toolkit"

    # OpenAI Configuration
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"

    # CORS Configuration - JSON array or comma-separated list of browser origins
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:5173"]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # A plain string reaches here when the value was not a JSON array
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Email Configuration
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = ""
    EMAIL_ENABLED: bool = False
    NOTIFY_EMAIL_TO: str = ""

    # Application Configuration
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
