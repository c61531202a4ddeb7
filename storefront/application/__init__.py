"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from storefront.application.calculation_service import CalculationService
from storefront.application.cart_service import CartService
from storefront.application.wishlist_service import WishlistService

__all__ = [
    "CalculationService",
    "CartService",
    "WishlistService",
]
