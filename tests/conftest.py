"""Shared database fixtures.

Service, repository and API tests run against a throwaway SQLite
database file seeded with a small catalog:

- ``p-tshirt`` (25.00, physical) with variations ``v-tshirt-s`` (25.00)
  and ``v-tshirt-xl`` (28.00)
- ``p-headphones`` (100.00, on sale for 80.00, physical)
- ``p-widget`` (100.00, physical)
- ``p-ebook`` (12.99, downloadable)
- ``p-unpriced`` (no price, physical)
- coupons FLAT20, SAVE10, FREESHIP, EXPIRED, ONCE, VIP, BROKEN
- addresses ``addr-ny`` (user-1) and ``addr-other`` (user-2)
"""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from storefront.domain import DeliveryType, DiscountType
from storefront.infrastructure.database import Base, create_engine, create_session_factory
from storefront.infrastructure.models import (
    AddressModel,
    CouponModel,
    ProductModel,
    ProductVariationModel,
)

PHYSICAL = [DeliveryType.PHYSICAL.value]
DOWNLOADABLE = [DeliveryType.DOWNLOADABLE.value]


def catalog_rows() -> list:
    """Rows of the test catalog."""
    now = datetime.now(timezone.utc)
    return [
        ProductModel(id="p-tshirt", name="T-Shirt", regular_price=Decimal("25.00"), delivery_types=PHYSICAL),
        ProductVariationModel(
            id="v-tshirt-s", product_id="p-tshirt", name="T-Shirt / S", regular_price=Decimal("25.00")
        ),
        ProductVariationModel(
            id="v-tshirt-xl", product_id="p-tshirt", name="T-Shirt / XL", regular_price=Decimal("28.00")
        ),
        ProductModel(
            id="p-headphones",
            name="Headphones",
            regular_price=Decimal("100.00"),
            sale_price=Decimal("80.00"),
            delivery_types=PHYSICAL,
        ),
        ProductModel(id="p-widget", name="Widget", regular_price=Decimal("100.00"), delivery_types=PHYSICAL),
        ProductModel(id="p-ebook", name="E-Book", regular_price=Decimal("12.99"), delivery_types=DOWNLOADABLE),
        ProductModel(id="p-unpriced", name="Unpriced", regular_price=None, delivery_types=PHYSICAL),
        CouponModel(
            id="c-flat20",
            code="FLAT20",
            discount_type=DiscountType.FIXED_CART.value,
            discount_value=Decimal("20.00"),
        ),
        CouponModel(
            id="c-save10",
            code="SAVE10",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=Decimal("10"),
        ),
        CouponModel(
            id="c-freeship",
            code="FREESHIP",
            discount_type=DiscountType.FIXED_CART.value,
            discount_value=Decimal("0"),
            free_shipping=True,
        ),
        CouponModel(
            id="c-expired",
            code="EXPIRED",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=Decimal("10"),
            expiry_date=now - timedelta(days=1),
        ),
        CouponModel(
            id="c-once",
            code="ONCE",
            discount_type=DiscountType.FIXED_CART.value,
            discount_value=Decimal("5.00"),
            max_usage=1,
        ),
        CouponModel(
            id="c-vip",
            code="VIP",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=Decimal("15"),
            allowed_emails=["vip@example.com"],
        ),
        CouponModel(
            id="c-broken",
            code="BROKEN",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=Decimal("150"),
        ),
        AddressModel(
            id="addr-ny",
            user_id="user-1",
            line1="350 5th Ave",
            city="New York",
            state="NY",
            postal_code="10118",
            country="US",
        ),
        AddressModel(
            id="addr-other",
            user_id="user-2",
            line1="1 Congress Ave",
            city="Austin",
            state="TX",
            postal_code="78701",
            country="US",
        ),
    ]


@pytest.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over a fresh, seeded SQLite database."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = create_session_factory(engine)
    async with factory() as session:
        session.add_all(catalog_rows())
        await session.commit()

    yield factory

    await engine.dispose()


