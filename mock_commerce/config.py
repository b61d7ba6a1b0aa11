"""Mock Commerce Backend Configuration"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class MockSettings(BaseSettings):
    """Settings for the mock backend, read from MOCK_* environment variables"""

    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8001

    # Payment methods that simulate processor outcomes
    decline_payment_method: str = "pm_card_declined"
    error_payment_method: str = "pm_card_error"

    # Inventory
    max_reservation_ttl_minutes: int = 60

    # Tax rate for states without an entry in the rate table
    default_tax_rate: Decimal = Decimal("0.08")

    class Config:
        env_prefix = "MOCK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_mock_settings() -> MockSettings:
    """Get cached settings instance"""
    return MockSettings()


mock_settings = get_mock_settings()
