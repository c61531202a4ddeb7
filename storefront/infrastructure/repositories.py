"""Repositories for cart engine persistence.

Repositories translate between ORM rows and domain entities. They are
constructed per unit of work around one session and never commit;
the unit of work owns the transaction.

Example usage:
    async with UnitOfWork(async_session_factory) as uow:
        cart = await uow.carts.get_by_user(UserId("user-1"), for_update=True)
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.domain.entities import (
    Cart,
    CartItem,
    Coupon,
    Product,
    ProductVariation,
    Wishlist,
    WishlistItem,
)
from storefront.domain.exceptions import ConcurrencyConflictError
from storefront.domain.value_objects import (
    AddressId,
    AddressInfo,
    CartId,
    CartItemId,
    CouponId,
    DeliveryType,
    DiscountType,
    ProductId,
    UserId,
    VariationId,
    WishlistId,
    WishlistItemId,
)
from storefront.infrastructure.database import Base
from storefront.infrastructure.models import (
    AddressModel,
    CartItemModel,
    CartModel,
    CouponModel,
    ProductModel,
    ProductVariationModel,
    WishlistItemModel,
    WishlistModel,
    cart_coupons,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime | None) -> datetime | None:
    """Attach UTC to datetimes read back without zone info (SQLite)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Mappers
# ============================================================================


def _delivery_types(values: list[str] | None) -> frozenset[DeliveryType] | None:
    if values is None:
        return None
    return frozenset(DeliveryType(v) for v in values)


def product_to_domain(model: ProductModel) -> Product:
    """Map a product row to the domain entity."""
    return Product(
        id=ProductId(model.id),
        name=model.name,
        sku=model.sku,
        regular_price=model.regular_price,
        sale_price=model.sale_price,
        sale_price_start_at=_aware(model.sale_price_start_at),
        sale_price_end_at=_aware(model.sale_price_end_at),
        delivery_types=_delivery_types(model.delivery_types),
        tax_class=model.tax_class,
        tax_status=model.tax_status,
        shipping_class=model.shipping_class,
        weight=model.weight,
        weight_unit=model.weight_unit,
        length=model.length,
        width=model.width,
        height=model.height,
        dimension_unit=model.dimension_unit,
    )


def variation_to_domain(model: ProductVariationModel) -> ProductVariation:
    """Map a variation row to the domain entity."""
    return ProductVariation(
        id=VariationId(model.id),
        product_id=ProductId(model.product_id),
        name=model.name,
        sku=model.sku,
        regular_price=model.regular_price,
        sale_price=model.sale_price,
        sale_price_start_at=_aware(model.sale_price_start_at),
        sale_price_end_at=_aware(model.sale_price_end_at),
        delivery_types=_delivery_types(model.delivery_types),
        tax_class=model.tax_class,
        tax_status=model.tax_status,
        shipping_class=model.shipping_class,
        weight=model.weight,
        weight_unit=model.weight_unit,
        length=model.length,
        width=model.width,
        height=model.height,
        dimension_unit=model.dimension_unit,
    )


def coupon_to_domain(model: CouponModel) -> Coupon:
    """Map a coupon row to the domain entity."""
    return Coupon(
        id=CouponId(model.id),
        code=model.code,
        description=model.description,
        discount_type=DiscountType(model.discount_type),
        discount_value=model.discount_value,
        minimum_spend=model.minimum_spend,
        maximum_spend=model.maximum_spend,
        free_shipping=model.free_shipping,
        expiry_date=_aware(model.expiry_date),
        max_usage=model.max_usage,
        usage_count=model.usage_count,
        allowed_emails=tuple(model.allowed_emails or ()),
    )


def cart_item_to_domain(model: CartItemModel) -> CartItem:
    return CartItem(
        id=CartItemId(model.id),
        product_id=ProductId(model.product_id),
        variation_id=VariationId(model.variation_id) if model.variation_id else None,
        quantity=model.quantity,
        product=product_to_domain(model.product) if model.product else None,
        variation=variation_to_domain(model.variation) if model.variation else None,
        added_at=_aware(model.created_at),
    )


def cart_to_domain(model: CartModel) -> Cart:
    """Map a cart row with its live items and coupons to the aggregate."""
    return Cart(
        id=CartId(model.id),
        user_id=UserId(model.created_by),
        items=[cart_item_to_domain(i) for i in model.items],
        coupons=[coupon_to_domain(c) for c in model.coupons],
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


def wishlist_to_domain(model: WishlistModel) -> Wishlist:
    """Map a wishlist row with its live items to the aggregate."""
    return Wishlist(
        id=WishlistId(model.id),
        user_id=UserId(model.created_by),
        items=[
            WishlistItem(
                id=WishlistItemId(i.id),
                product_id=ProductId(i.product_id),
                variation_id=VariationId(i.variation_id) if i.variation_id else None,
                product=product_to_domain(i.product) if i.product else None,
                variation=variation_to_domain(i.variation) if i.variation else None,
                added_at=_aware(i.created_at),
            )
            for i in model.items
        ],
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


def address_to_domain(model: AddressModel) -> AddressInfo:
    return AddressInfo(
        id=model.id,
        line1=model.line1,
        line2=model.line2,
        city=model.city,
        state=model.state,
        postal_code=model.postal_code,
        country=model.country,
    )


# ============================================================================
# Base Repository
# ============================================================================


class SessionRepository:
    """Holds the session shared by all repositories of a unit of work."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def _insert(self, model: Base, resource: str) -> None:
        """Insert a row inside a savepoint, translating unique violations.

        A failed insert only rolls back the savepoint, so the surrounding
        transaction stays usable.

        Raises:
            ConcurrencyConflictError: If a concurrent writer created the same row.
        """
        try:
            async with self.session.begin_nested():
                self.session.add(model)
        except IntegrityError as e:
            raise ConcurrencyConflictError(resource, str(e.orig)) from e


# ============================================================================
# Cart Repositories
# ============================================================================


class CartRepository(SessionRepository):
    """Repository for carts and their coupon associations."""

    async def get_by_user(self, user_id: UserId, for_update: bool = False) -> Cart | None:
        """Get the user's live cart.

        Args:
            user_id: Owner of the cart.
            for_update: Lock the cart row until the transaction ends.

        Returns:
            Cart with items, product snapshots and coupons, or None.
        """
        stmt = (
            select(CartModel)
            .where(CartModel.created_by == str(user_id), CartModel.deleted_at.is_(None))
            .options(
                selectinload(CartModel.items).selectinload(CartItemModel.product),
                selectinload(CartModel.items).selectinload(CartItemModel.variation),
                selectinload(CartModel.coupons),
            )
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=CartModel)

        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return cart_to_domain(model) if model else None

    async def add(self, cart: Cart) -> None:
        """Insert a new cart.

        Raises:
            ConcurrencyConflictError: If the user already has a live cart.
        """
        await self._insert(
            CartModel(
                id=str(cart.id),
                created_by=str(cart.user_id),
                created_at=cart.created_at,
                updated_at=cart.updated_at,
            ),
            "cart",
        )

    async def attach_coupons(self, cart_id: CartId, coupon_ids: Iterable[CouponId]) -> None:
        rows = [{"cart_id": str(cart_id), "coupon_id": str(cid), "created_at": _utcnow()} for cid in coupon_ids]
        if not rows:
            return
        try:
            async with self.session.begin_nested():
                await self.session.execute(insert(cart_coupons), rows)
        except IntegrityError as e:
            raise ConcurrencyConflictError("cart_coupons", str(e.orig)) from e

    async def touch(self, cart: Cart) -> None:
        """Persist the cart's updated_at timestamp."""
        await self.session.execute(
            update(CartModel).where(CartModel.id == str(cart.id)).values(updated_at=cart.updated_at)
        )


class CartItemRepository(SessionRepository):
    """Repository for cart lines."""

    async def add(self, cart_id: CartId, item: CartItem) -> None:
        """Insert a new cart line.

        Raises:
            ConcurrencyConflictError: If a live line with the same identity exists.
        """
        await self._insert(
            CartItemModel(
                id=str(item.id),
                cart_id=str(cart_id),
                product_id=str(item.product_id),
                variation_id=str(item.variation_id) if item.variation_id else None,
                quantity=item.quantity,
                created_at=item.added_at,
            ),
            "cart_item",
        )

    async def save(self, item: CartItem) -> None:
        """Persist quantity and variation of an existing line."""
        await self.session.execute(
            update(CartItemModel)
            .where(CartItemModel.id == str(item.id))
            .values(
                quantity=item.quantity,
                variation_id=str(item.variation_id) if item.variation_id else None,
                updated_at=_utcnow(),
            )
        )

    async def soft_delete(self, item_ids: Iterable[CartItemId]) -> None:
        ids = [str(i) for i in item_ids]
        if not ids:
            return
        await self.session.execute(
            update(CartItemModel)
            .where(CartItemModel.id.in_(ids), CartItemModel.deleted_at.is_(None))
            .values(deleted_at=_utcnow())
        )


# ============================================================================
# Wishlist Repositories
# ============================================================================


class WishlistRepository(SessionRepository):
    """Repository for wishlists."""

    async def get_by_user(self, user_id: UserId, for_update: bool = False) -> Wishlist | None:
        stmt = (
            select(WishlistModel)
            .where(WishlistModel.created_by == str(user_id), WishlistModel.deleted_at.is_(None))
            .options(
                selectinload(WishlistModel.items).selectinload(WishlistItemModel.product),
                selectinload(WishlistModel.items).selectinload(WishlistItemModel.variation),
            )
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=WishlistModel)

        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return wishlist_to_domain(model) if model else None

    async def add(self, wishlist: Wishlist) -> None:
        """Insert a new wishlist.

        Raises:
            ConcurrencyConflictError: If the user already has a live wishlist.
        """
        await self._insert(
            WishlistModel(
                id=str(wishlist.id),
                created_by=str(wishlist.user_id),
                created_at=wishlist.created_at,
                updated_at=wishlist.updated_at,
            ),
            "wishlist",
        )


class WishlistItemRepository(SessionRepository):
    """Repository for wishlist entries."""

    async def add(self, wishlist_id: WishlistId, item: WishlistItem) -> None:
        await self._insert(
            WishlistItemModel(
                id=str(item.id),
                wishlist_id=str(wishlist_id),
                product_id=str(item.product_id),
                variation_id=str(item.variation_id) if item.variation_id else None,
                created_at=item.added_at,
            ),
            "wishlist_item",
        )

    async def soft_delete(self, item_ids: Iterable[WishlistItemId]) -> None:
        ids = [str(i) for i in item_ids]
        if not ids:
            return
        await self.session.execute(
            update(WishlistItemModel)
            .where(WishlistItemModel.id.in_(ids), WishlistItemModel.deleted_at.is_(None))
            .values(deleted_at=_utcnow())
        )


# ============================================================================
# Read Services
# ============================================================================


class ProductRepository(SessionRepository):
    """Read access to live products and variations."""

    async def get(self, product_id: ProductId) -> Product | None:
        result = await self.session.execute(
            select(ProductModel).where(
                ProductModel.id == str(product_id),
                ProductModel.deleted_at.is_(None),
            )
        )
        model = result.scalar_one_or_none()
        return product_to_domain(model) if model else None

    async def get_variation(
        self,
        product_id: ProductId,
        variation_id: VariationId,
    ) -> ProductVariation | None:
        """Get a variation, only if it belongs to the product.

        Args:
            product_id: Parent product.
            variation_id: Variation to load.

        Returns:
            ProductVariation or None.
        """
        result = await self.session.execute(
            select(ProductVariationModel).where(
                ProductVariationModel.id == str(variation_id),
                ProductVariationModel.product_id == str(product_id),
                ProductVariationModel.deleted_at.is_(None),
            )
        )
        model = result.scalar_one_or_none()
        return variation_to_domain(model) if model else None


class CouponRepository(SessionRepository):
    """Read access to coupons plus the usage counter."""

    async def get_by_codes(self, codes: Iterable[str]) -> list[Coupon]:
        result = await self.session.execute(
            select(CouponModel)
            .where(CouponModel.code.in_(list(codes)), CouponModel.deleted_at.is_(None))
            .order_by(CouponModel.code)
        )
        return [coupon_to_domain(m) for m in result.scalars().all()]

    async def increment_usage(self, coupon_id: CouponId) -> bool:
        """Consume one use of a coupon.

        The increment is conditional on the usage limit, so concurrent
        applications cannot push a coupon past ``max_usage``.

        Returns:
            True if a use was consumed, False if the limit was reached.
        """
        result = await self.session.execute(
            update(CouponModel)
            .where(
                CouponModel.id == str(coupon_id),
                or_(
                    CouponModel.max_usage.is_(None),
                    CouponModel.usage_count < CouponModel.max_usage,
                ),
            )
            .values(usage_count=CouponModel.usage_count + 1)
        )
        return result.rowcount == 1


class AddressRepository(SessionRepository):
    """Read access to user addresses."""

    async def get_for_user(self, address_id: AddressId, user_id: UserId) -> AddressInfo | None:
        result = await self.session.execute(
            select(AddressModel).where(
                AddressModel.id == str(address_id),
                AddressModel.user_id == str(user_id),
                AddressModel.deleted_at.is_(None),
            )
        )
        model = result.scalar_one_or_none()
        return address_to_domain(model) if model else None
