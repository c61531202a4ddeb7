"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings

from storefront.domain.value_objects import TaxBasis


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://storefront:storefront_dev_password@db:5432/storefront"

    # Logging
    log_level: str = "INFO"

    # Pricing
    currency: str = "USD"
    prices_include_tax: bool = False

    # Tax
    tax_rate: Decimal = Decimal("8.5")
    tax_label: str = "Sales Tax"
    tax_based_on: TaxBasis = TaxBasis.SHIPPING_ADDRESS
    regional_tax_rates: dict[str, Decimal] = {}

    # Shipping
    flat_rate_cost: Decimal = Decimal("9.99")
    free_shipping_threshold: Decimal = Decimal("50.00")
    shipping_countries: list[str] = []

    # Store address (used when tax_based_on is STORE_ADDRESS)
    store_address_line1: str | None = None
    store_city: str | None = None
    store_state: str | None = None
    store_postal_code: str | None = None
    store_country: str = "US"

    # Cart limits
    max_cart_lines: int = 100
    max_coupons: int = 10
    merge_retry_attempts: int = 3

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
