"""Wishlist application service."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.entities import Wishlist
from storefront.domain.exceptions import (
    ProductNotFoundError,
    ProductVariationNotFoundError,
    WishlistNotFoundError,
)
from storefront.domain.value_objects import (
    ItemIdentity,
    ProductId,
    UserId,
    VariationId,
    WishlistItemId,
)
from storefront.infrastructure.retry import conflict_retry
from storefront.infrastructure.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class WishlistService:
    """Application service for wishlist operations."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        retry_attempts: int = 3,
    ) -> None:
        self._session_factory = session_factory
        self._retry_attempts = retry_attempts

    async def _reload(self, uow: UnitOfWork, user_id: UserId) -> Wishlist:
        wishlist = await uow.wishlists.get_by_user(user_id)
        if wishlist is None:
            raise WishlistNotFoundError(str(user_id))
        return wishlist

    async def add_to_wishlist(
        self,
        user_id: UserId,
        product_id: ProductId,
        variation_id: VariationId | None = None,
    ) -> Wishlist:
        """Add a product selection to the user's wishlist.

        The wishlist is created on first use. Adding a selection that
        is already listed changes nothing.

        Args:
            user_id: Owner of the wishlist.
            product_id: Product to add.
            variation_id: Optional variation of the product.

        Returns:
            The reloaded wishlist.

        Raises:
            ProductNotFoundError: If the product does not exist.
            ProductVariationNotFoundError: If the variation is not the product's.
        """
        identity = ItemIdentity(product_id, variation_id)

        async for attempt in conflict_retry(self._retry_attempts):
            with attempt:
                async with UnitOfWork(self._session_factory) as uow:
                    if await uow.products.get(product_id) is None:
                        raise ProductNotFoundError(str(product_id))
                    if variation_id is not None:
                        if await uow.products.get_variation(product_id, variation_id) is None:
                            raise ProductVariationNotFoundError(str(product_id), str(variation_id))

                    wishlist = await uow.wishlists.get_by_user(user_id, for_update=True)
                    if wishlist is None:
                        wishlist = Wishlist.create(user_id)
                        await uow.wishlists.add(wishlist)

                    item = wishlist.add_item(identity)
                    if item is not None:
                        await uow.wishlist_items.add(wishlist.id, item)
                    wishlist = await self._reload(uow, user_id)

                logger.info(
                    "Wishlist item added" if item else "Wishlist item already present",
                    wishlist_id=str(wishlist.id),
                    user_id=str(user_id),
                    product_id=str(product_id),
                    variation_id=str(variation_id) if variation_id else None,
                )
                return wishlist

    async def remove_items_from_wishlist(
        self,
        user_id: UserId,
        wishlist_item_ids: list[WishlistItemId],
    ) -> Wishlist:
        """Remove wishlist entries by id, all or nothing.

        Raises:
            WishlistNotFoundError: If the user has no wishlist.
            WishlistItemNotFoundError: If an id is not listed.
        """
        async with UnitOfWork(self._session_factory) as uow:
            wishlist = await uow.wishlists.get_by_user(user_id, for_update=True)
            if wishlist is None:
                raise WishlistNotFoundError(str(user_id))
            removed = wishlist.remove_items(wishlist_item_ids)
            await uow.wishlist_items.soft_delete(item.id for item in removed)
            wishlist = await self._reload(uow, user_id)

        logger.info(
            "Wishlist items removed",
            wishlist_id=str(wishlist.id),
            removed=[str(item.id) for item in removed],
        )
        return wishlist

    async def get_wishlist(self, user_id: UserId) -> Wishlist:
        """Get the user's wishlist.

        Raises:
            WishlistNotFoundError: If the user has no wishlist.
        """
        async with UnitOfWork(self._session_factory) as uow:
            return await self._reload(uow, user_id)
