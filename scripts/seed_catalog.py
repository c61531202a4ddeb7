#!/usr/bin/env python3
"""Seed demo catalog script.

Loads a small demo catalog (products with variations), a few coupons and
an address for a demo user, so the cart endpoints can be tried out.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --user demo-user --no-clear
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path
from uuid import NAMESPACE_URL, uuid5

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import delete

from storefront.domain.value_objects import DeliveryType, DiscountType
from storefront.infrastructure.database import Base, async_session_factory, engine
from storefront.infrastructure.models import (
    AddressModel,
    CouponModel,
    ProductModel,
    ProductVariationModel,
)

PHYSICAL = [DeliveryType.PHYSICAL.value]
DOWNLOADABLE = [DeliveryType.DOWNLOADABLE.value]


def demo_id(name: str) -> str:
    """Stable id so repeated seeding yields the same records."""
    return str(uuid5(NAMESPACE_URL, f"storefront-demo:{name}"))


def demo_products() -> list[ProductModel]:
    tshirt = ProductModel(
        id=demo_id("tshirt"),
        name="Classic T-Shirt",
        sku="TSHIRT",
        regular_price=Decimal("25.00"),
        delivery_types=PHYSICAL,
        tax_class="standard",
        tax_status="Taxable",
        shipping_class="apparel",
        weight=Decimal("0.200"),
        weight_unit="kg",
    )
    tshirt.variations = [
        ProductVariationModel(
            id=demo_id(f"tshirt-{size}"),
            name=f"Classic T-Shirt / {size.upper()}",
            sku=f"TSHIRT-{size.upper()}",
            regular_price=price,
        )
        for size, price in [("s", Decimal("25.00")), ("m", Decimal("25.00")), ("xl", Decimal("28.00"))]
    ]

    return [
        tshirt,
        ProductModel(
            id=demo_id("headphones"),
            name="Wireless Headphones",
            sku="HEADPHONES",
            regular_price=Decimal("100.00"),
            sale_price=Decimal("80.00"),
            delivery_types=PHYSICAL,
            tax_class="standard",
            tax_status="Taxable",
            shipping_class="electronics",
            weight=Decimal("0.350"),
            weight_unit="kg",
            length=Decimal("20"),
            width=Decimal("18"),
            height=Decimal("8"),
            dimension_unit="cm",
        ),
        ProductModel(
            id=demo_id("ebook"),
            name="Cooking E-Book",
            sku="EBOOK",
            regular_price=Decimal("12.99"),
            delivery_types=DOWNLOADABLE,
            tax_status="Taxable",
        ),
    ]


def demo_coupons() -> list[CouponModel]:
    return [
        CouponModel(
            id=demo_id("coupon-welcome10"),
            code="WELCOME10",
            description="10% off your order",
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=Decimal("10"),
            maximum_spend=Decimal("30.00"),
        ),
        CouponModel(
            id=demo_id("coupon-save20"),
            code="SAVE20",
            description="$20 off orders of $100 or more",
            discount_type=DiscountType.FIXED_CART.value,
            discount_value=Decimal("20.00"),
            minimum_spend=Decimal("100.00"),
            max_usage=100,
        ),
        CouponModel(
            id=demo_id("coupon-freeship"),
            code="FREESHIP",
            description="Free shipping",
            discount_type=DiscountType.FIXED_CART.value,
            discount_value=Decimal("0"),
            free_shipping=True,
        ),
    ]


def demo_address(user_id: str) -> AddressModel:
    return AddressModel(
        id=demo_id(f"address-{user_id}"),
        user_id=user_id,
        line1="350 5th Ave",
        city="New York",
        state="NY",
        postal_code="10118",
        country="US",
    )


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed(user_id: str, clear: bool = True) -> dict:
    """Seed demo data.

    Args:
        user_id: User that owns the demo address.
        clear: Whether to remove previously seeded demo records first.

    Returns:
        Counts of seeded records.
    """
    products = demo_products()
    coupons = demo_coupons()
    address = demo_address(user_id)

    async with async_session_factory() as session:
        if clear:
            await session.execute(delete(AddressModel).where(AddressModel.id == address.id))
            await session.execute(delete(CouponModel).where(CouponModel.id.in_([c.id for c in coupons])))
            await session.execute(
                delete(ProductVariationModel).where(
                    ProductVariationModel.product_id.in_([p.id for p in products])
                )
            )
            await session.execute(delete(ProductModel).where(ProductModel.id.in_([p.id for p in products])))

        session.add_all([*products, *coupons, address])
        await session.commit()

    return {
        "products": len(products),
        "variations": sum(len(p.variations) for p in products),
        "coupons": len(coupons),
        "address_id": address.id,
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed demo catalog, coupons and an address",
    )
    parser.add_argument(
        "--user",
        default="demo-user",
        help="User id owning the demo address (default: demo-user)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't remove previously seeded demo records",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Storefront Demo Seeder")
    print("=" * 60)

    print("Creating database tables...")
    await create_tables()

    result = await seed(user_id=args.user, clear=not args.no_clear)

    print(f"  Products:   {result['products']}")
    print(f"  Variations: {result['variations']}")
    print(f"  Coupons:    {result['coupons']}")
    print(f"  Address:    {result['address_id']} (user {args.user})")
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
