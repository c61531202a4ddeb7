"""Service fixtures over the seeded test database."""

import pytest

from storefront.application import CalculationService, CartService, WishlistService
from storefront.pricing import PricingConfig


@pytest.fixture
def pricing_config() -> PricingConfig:
    return PricingConfig()


@pytest.fixture
def cart_service(session_factory, pricing_config) -> CartService:
    return CartService(session_factory, config=pricing_config, retry_attempts=2)


@pytest.fixture
def wishlist_service(session_factory) -> WishlistService:
    return WishlistService(session_factory, retry_attempts=2)


@pytest.fixture
def calculation_service(session_factory, pricing_config) -> CalculationService:
    return CalculationService(session_factory, config=pricing_config)
