"""Request dependencies.

Composition root of the API: builds services from the session factory
and settings, and extracts the caller's identity from gateway headers.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.application.calculation_service import CalculationService
from storefront.application.cart_service import CartService
from storefront.application.wishlist_service import WishlistService
from storefront.domain.value_objects import UserId
from storefront.infrastructure.config import Settings, settings
from storefront.infrastructure.database import async_session_factory
from storefront.pricing.config import PricingConfig


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the database session factory."""
    return async_session_factory


def get_pricing_config(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> PricingConfig:
    return PricingConfig.from_settings(app_settings)


def get_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UserId:
    """Extract the authenticated user id set by the gateway.

    Raises:
        HTTPException: 401 if the header is missing.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "UNAUTHORIZED",
                "message": "Missing X-User-ID header",
            },
        )
    return UserId(x_user_id.strip())


def get_user_email(
    x_user_email: Annotated[str | None, Header()] = None,
) -> str | None:
    return x_user_email.strip() if x_user_email else None


def get_cart_service(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    app_settings: Annotated[Settings, Depends(get_settings)],
    config: Annotated[PricingConfig, Depends(get_pricing_config)],
) -> CartService:
    return CartService(
        session_factory,
        config=config,
        retry_attempts=app_settings.merge_retry_attempts,
    )


def get_wishlist_service(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> WishlistService:
    return WishlistService(session_factory, retry_attempts=app_settings.merge_retry_attempts)


def get_calculation_service(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    config: Annotated[PricingConfig, Depends(get_pricing_config)],
) -> CalculationService:
    return CalculationService(session_factory, config=config)
