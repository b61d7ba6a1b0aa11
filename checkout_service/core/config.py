"""Checkout Service Configuration"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Veloura Checkout"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    # Commerce backend (defaults point at the mock backend)
    inventory_base_url: str = "http://localhost:8001"
    payments_base_url: str = "http://localhost:8001"
    shipping_base_url: str = "http://localhost:8001"
    analytics_base_url: str = "http://localhost:8001"
    loyalty_base_url: str = "http://localhost:8001"
    http_timeout_seconds: float = 30.0

    # Checkout behaviour
    currency: str = "USD"
    reservation_ttl_minutes: int = 15
    release_attempts: int = 3
    session_max_age_hours: int = 24

    # Side effects
    analytics_enabled: bool = True
    loyalty_enabled: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
