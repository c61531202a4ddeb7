"""Cart application service.

Orchestrates cart mutations:
- Merge-on-add of a product/variation (with null-variation promotion)
- Quantity updates and removal of lines
- Coupon application
- Draining matching wishlist entries after an add
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.entities import Cart, MergeAction
from storefront.domain.exceptions import (
    CartNotFoundError,
    CouponNotApplicableError,
    CouponNotFoundError,
    DuplicateCouponCodeError,
    InvalidQuantityError,
    ProductNotFoundError,
    ProductVariationNotFoundError,
    ValidationError,
)
from storefront.domain.value_objects import (
    CartItemId,
    ItemIdentity,
    ProductId,
    UserId,
    VariationId,
)
from storefront.infrastructure.retry import conflict_retry
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.pricing.config import PricingConfig

logger = structlog.get_logger()


class CartService:
    """Application service for cart operations.

    Every mutation runs in its own unit of work with the cart row locked,
    and is retried when a concurrent request won a uniqueness race.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: PricingConfig | None = None,
        retry_attempts: int = 3,
    ) -> None:
        """Initialize cart service.

        Args:
            session_factory: Factory for database sessions.
            config: Pricing configuration carrying cart limits.
            retry_attempts: Attempts per operation on concurrency conflicts.
        """
        self._session_factory = session_factory
        self._config = config or PricingConfig()
        self._retry_attempts = retry_attempts

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self._session_factory)

    async def _get_or_create_cart(self, uow: UnitOfWork, user_id: UserId) -> Cart:
        cart = await uow.carts.get_by_user(user_id, for_update=True)
        if cart is None:
            cart = Cart.create(user_id)
            await uow.carts.add(cart)
            logger.info("Cart created", cart_id=str(cart.id), user_id=str(user_id))
        return cart

    async def _require_cart(self, uow: UnitOfWork, user_id: UserId) -> Cart:
        cart = await uow.carts.get_by_user(user_id, for_update=True)
        if cart is None:
            raise CartNotFoundError(str(user_id))
        return cart

    async def _reload(self, uow: UnitOfWork, user_id: UserId) -> Cart:
        cart = await uow.carts.get_by_user(user_id)
        if cart is None:
            raise CartNotFoundError(str(user_id))
        return cart

    # =========================================================================
    # Add / Update / Remove
    # =========================================================================

    async def add_to_cart(
        self,
        user_id: UserId,
        product_id: ProductId,
        quantity: int,
        variation_id: VariationId | None = None,
    ) -> Cart:
        """Merge a product selection into the user's cart.

        The quantity replaces any existing quantity for the same
        selection. A base-product line is promoted in place when a
        variation of the same product is added.

        Args:
            user_id: Owner of the cart.
            product_id: Product to add.
            quantity: Desired quantity.
            variation_id: Optional variation of the product.

        Returns:
            The reloaded cart.

        Raises:
            InvalidQuantityError: If quantity is not positive.
            ProductNotFoundError: If the product does not exist.
            ProductVariationNotFoundError: If the variation is not the product's.
            CartLimitExceededError: If the cart would exceed max_cart_lines.
            ConcurrencyConflictError: If every retry lost a race.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        identity = ItemIdentity(product_id, variation_id)

        async for attempt in conflict_retry(self._retry_attempts):
            with attempt:
                async with self._uow() as uow:
                    if await uow.products.get(product_id) is None:
                        raise ProductNotFoundError(str(product_id))
                    if variation_id is not None:
                        if await uow.products.get_variation(product_id, variation_id) is None:
                            raise ProductVariationNotFoundError(str(product_id), str(variation_id))

                    cart = await self._get_or_create_cart(uow, user_id)
                    result = cart.merge_item(identity, quantity, max_lines=self._config.max_cart_lines)

                    if result.action == MergeAction.CREATED:
                        await uow.cart_items.add(cart.id, result.item)
                    else:
                        await uow.cart_items.save(result.item)
                    await uow.carts.touch(cart)

                    await self._drain_wishlist(uow, user_id, identity)
                    cart = await self._reload(uow, user_id)

                logger.info(
                    "Item merged into cart",
                    cart_id=str(cart.id),
                    user_id=str(user_id),
                    product_id=str(product_id),
                    variation_id=str(variation_id) if variation_id else None,
                    quantity=quantity,
                    action=result.action.value,
                )
                return cart

    async def _drain_wishlist(self, uow: UnitOfWork, user_id: UserId, identity: ItemIdentity) -> None:
        """Remove the wishlist entry matching a selection that moved to the cart."""
        wishlist = await uow.wishlists.get_by_user(user_id, for_update=True)
        if wishlist is None:
            return
        removed = wishlist.discard(identity)
        if removed is not None:
            await uow.wishlist_items.soft_delete([removed.id])
            logger.info(
                "Wishlist item moved to cart",
                wishlist_id=str(wishlist.id),
                wishlist_item_id=str(removed.id),
            )

    async def update_cart_item(
        self,
        user_id: UserId,
        product_id: ProductId,
        quantity: int,
        variation_id: VariationId | None = None,
    ) -> Cart:
        """Overwrite the quantity of a product's line.

        Args:
            user_id: Owner of the cart.
            product_id: Product whose line is updated.
            quantity: New quantity.
            variation_id: Required when the product has several lines.

        Returns:
            The reloaded cart.

        Raises:
            InvalidQuantityError: If quantity is not positive.
            CartNotFoundError: If the user has no cart.
            CartItemNotFoundError: If no line matches.
            AmbiguousCartItemError: If several lines match and no variation was given.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        async for attempt in conflict_retry(self._retry_attempts):
            with attempt:
                async with self._uow() as uow:
                    cart = await self._require_cart(uow, user_id)
                    item = cart.update_item_quantity(product_id, quantity, variation_id)
                    await uow.cart_items.save(item)
                    await uow.carts.touch(cart)
                    cart = await self._reload(uow, user_id)

                logger.info(
                    "Cart item updated",
                    cart_id=str(cart.id),
                    cart_item_id=str(item.id),
                    quantity=quantity,
                )
                return cart

    async def remove_items_from_cart(self, user_id: UserId, cart_item_ids: list[CartItemId]) -> Cart:
        """Remove lines by cart-item id.

        Either every id is removed or none is.

        Raises:
            CartNotFoundError: If the user has no cart.
            CartItemNotFoundError: If an id is not a live line of the cart.
        """
        async with self._uow() as uow:
            cart = await self._require_cart(uow, user_id)
            removed = cart.remove_items(cart_item_ids)
            await uow.cart_items.soft_delete(item.id for item in removed)
            await uow.carts.touch(cart)
            cart = await self._reload(uow, user_id)

        logger.info(
            "Cart items removed",
            cart_id=str(cart.id),
            removed=[str(item.id) for item in removed],
        )
        return cart

    # =========================================================================
    # Coupons
    # =========================================================================

    async def apply_coupons(
        self,
        user_id: UserId,
        codes: list[str],
        email: str | None = None,
    ) -> Cart:
        """Attach coupons to the user's cart.

        Already attached coupons are left untouched. Each newly attached
        coupon consumes one use.

        Args:
            user_id: Owner of the cart.
            codes: Coupon codes to apply.
            email: Customer email checked against coupon restrictions.

        Returns:
            The reloaded cart.

        Raises:
            ValidationError: If a code is blank.
            DuplicateCouponCodeError: If a code is repeated.
            CartNotFoundError: If the user has no cart.
            CouponNotFoundError: If a code does not resolve.
            CouponNotApplicableError: If a coupon is expired, exhausted or restricted.
            InvalidCouponRuleError: If a coupon's rule is malformed.
            CartLimitExceededError: If the cart would exceed max_coupons.
        """
        normalized = [code.strip() for code in codes]
        if not normalized or any(not code for code in normalized):
            raise ValidationError("Coupon codes must not be empty", details={"codes": codes})
        duplicates = sorted({code for code in normalized if normalized.count(code) > 1})
        if duplicates:
            raise DuplicateCouponCodeError(duplicates)

        async for attempt in conflict_retry(self._retry_attempts):
            with attempt:
                async with self._uow() as uow:
                    cart = await self._require_cart(uow, user_id)
                    coupons = await uow.coupons.get_by_codes(normalized)

                    found = {c.code for c in coupons}
                    missing = [code for code in normalized if code not in found]
                    if missing:
                        raise CouponNotFoundError(missing)

                    now = datetime.now(timezone.utc)
                    attached = []
                    for coupon in coupons:
                        if cart.has_coupon(coupon.id):
                            continue
                        coupon.ensure_applicable(now, email)
                        cart.attach_coupon(coupon, max_coupons=self._config.max_coupons)
                        attached.append(coupon)

                    for coupon in attached:
                        if not await uow.coupons.increment_usage(coupon.id):
                            raise CouponNotApplicableError(
                                coupon.code, "coupon has reached its maximum usage"
                            )
                    await uow.carts.attach_coupons(cart.id, (c.id for c in attached))
                    await uow.carts.touch(cart)
                    cart = await self._reload(uow, user_id)

                logger.info(
                    "Coupons applied",
                    cart_id=str(cart.id),
                    codes=[c.code for c in attached],
                )
                return cart

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_cart(self, user_id: UserId) -> Cart:
        """Get the user's live cart.

        Raises:
            CartNotFoundError: If the user has no cart.
        """
        async with self._uow() as uow:
            return await self._reload(uow, user_id)
