"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from storefront.api.carts import router as carts_router
from storefront.api.health import router as health_router
from storefront.api.wishlist import router as wishlist_router

__all__ = [
    "carts_router",
    "health_router",
    "wishlist_router",
]
