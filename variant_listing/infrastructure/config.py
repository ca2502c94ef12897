"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Authentication
    api_key: str = "dev-api-key-change-in-production"

    # Pricing
    # None keeps the raw product of price and currency factor
    price_decimal_places: int | None = 2
    default_fallback_customer_group: str = "EK"

    # Combinations
    max_combination_groups: int = 16

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "VARIANT_LISTING_"


settings = Settings()
