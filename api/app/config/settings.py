from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Any
import os
import json


class Settings(BaseSettings):
    PROJECT_NAME: str = "Encore API"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Database
    DATABASE_URL: str
    SQLALCHEMY_ECHO: bool = False

    # Auth (bearer JWT)
    AUTH_SECRET_KEY: str = ""
    AUTH_ALGORITHM: str = "HS256"
    AUTH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # TimeBomb expiry sweep
    TIMEBOMB_SWEEP_ENABLED: bool = True
    TIMEBOMB_SWEEP_INTERVAL_SECONDS: int = 30

    # Real-time
    SOCKETIO_PATH: str = "socket.io"

    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(__file__), "../../../.env"),
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v: Any) -> List[str]:
        """Parse allowed origins from JSON or a comma-delimited string."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except (json.JSONDecodeError, TypeError):
                # If not valid JSON, try splitting by comma
                return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate that the database URL is present and uses PostgreSQL."""
        if not v:
            raise ValueError("DATABASE_URL must be set")
        if not v.startswith(('postgresql://', 'postgresql+psycopg2://', 'postgresql+asyncpg://')):
            raise ValueError("DATABASE_URL must be a valid PostgreSQL URL")
        return v

    @field_validator('TIMEBOMB_SWEEP_INTERVAL_SECONDS')
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        """Keep the sweep interval positive."""
        if v < 1:
            raise ValueError("TIMEBOMB_SWEEP_INTERVAL_SECONDS must be at least 1")
        return v


settings = Settings()
