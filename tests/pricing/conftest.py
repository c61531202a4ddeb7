"""Shared fixtures for pricing tests."""

from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.domain import (
    AddressInfo,
    Cart,
    CartItem,
    CartItemId,
    Coupon,
    CouponId,
    DeliveryType,
    DiscountType,
    Product,
    ProductId,
    ProductVariation,
    UserId,
    VariationId,
)
from storefront.pricing import PricingConfig

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

PHYSICAL = frozenset({DeliveryType.PHYSICAL})
DOWNLOADABLE = frozenset({DeliveryType.DOWNLOADABLE})


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> PricingConfig:
    """Default pricing options: 8.5% tax by shipping address, 9.99 flat rate, free from 50."""
    return PricingConfig()


@pytest.fixture
def ny_address() -> AddressInfo:
    return AddressInfo(
        id="addr-ny",
        line1="350 5th Ave",
        city="New York",
        state="NY",
        postal_code="10118",
        country="US",
    )


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for product snapshots."""

    def factory(
        product_id: str = "p1",
        price: str | None = "100.00",
        sale: str | None = None,
        delivery_types: frozenset[DeliveryType] | None = PHYSICAL,
        **kwargs,
    ) -> Product:
        return Product(
            id=ProductId(product_id),
            name=kwargs.pop("name", f"Product {product_id}"),
            regular_price=Decimal(price) if price is not None else None,
            sale_price=Decimal(sale) if sale is not None else None,
            delivery_types=delivery_types,
            **kwargs,
        )

    return factory


@pytest.fixture
def make_variation() -> Callable[..., ProductVariation]:
    """Factory for variation snapshots."""

    def factory(
        product: Product,
        variation_id: str = "v1",
        price: str | None = "25.00",
        sale: str | None = None,
        **kwargs,
    ) -> ProductVariation:
        return ProductVariation(
            id=VariationId(variation_id),
            product_id=product.id,
            name=kwargs.pop("name", f"{product.name} / {variation_id}"),
            regular_price=Decimal(price) if price is not None else None,
            sale_price=Decimal(sale) if sale is not None else None,
            **kwargs,
        )

    return factory


@pytest.fixture
def make_item() -> Callable[..., CartItem]:
    """Factory for cart items with their snapshots loaded."""

    def factory(
        product: Product,
        quantity: int = 1,
        variation: ProductVariation | None = None,
        added_at: datetime = NOW,
    ) -> CartItem:
        return CartItem(
            id=CartItemId.generate(),
            product_id=product.id,
            variation_id=variation.id if variation is not None else None,
            quantity=quantity,
            product=product,
            variation=variation,
            added_at=added_at,
        )

    return factory


@pytest.fixture
def make_coupon() -> Callable[..., Coupon]:
    """Factory for coupons."""

    def factory(
        code: str = "SAVE10",
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        value: str = "10",
        **kwargs,
    ) -> Coupon:
        return Coupon(
            id=CouponId(f"coupon-{code.lower()}"),
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(value),
            **kwargs,
        )

    return factory


@pytest.fixture
def make_cart() -> Callable[..., Cart]:
    """Factory for carts holding given items and coupons."""

    def factory(items: list[CartItem] | None = None, coupons: list[Coupon] | None = None) -> Cart:
        cart = Cart.create(UserId("user-1"))
        cart.items = list(items or [])
        cart.coupons = list(coupons or [])
        return cart

    return factory
