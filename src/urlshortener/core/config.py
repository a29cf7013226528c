from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    app_env: str = "dev"
    host: str = "0.0.0.0"
    port: int = 5000
    base_url: str = "http://localhost:5000"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./urlshortener.db"
    storage_timeout_seconds: float = 5.0

    # Short codes
    short_code_length: int = 7
    max_allocation_attempts: int = 10

    # Admin listing; unset means the endpoint is open
    admin_token: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
