"""Unit of work.

Owns one session and one transaction, and exposes the repositories
bound to that session. Unique violations surfacing at commit are
translated into ConcurrencyConflictError so services can retry.
"""

from types import TracebackType
from typing import Self

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.exceptions import ConcurrencyConflictError
from storefront.infrastructure.repositories import (
    AddressRepository,
    CartItemRepository,
    CartRepository,
    CouponRepository,
    ProductRepository,
    WishlistItemRepository,
    WishlistRepository,
)

logger = structlog.get_logger()


class UnitOfWork:
    """Transaction scope for one service operation.

    Example usage:
        async with UnitOfWork(session_factory) as uow:
            cart = await uow.carts.get_by_user(user_id, for_update=True)
            ...
        # committed on clean exit, rolled back on error
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> Self:
        self.session = self._session_factory()
        self.carts = CartRepository(self.session)
        self.cart_items = CartItemRepository(self.session)
        self.wishlists = WishlistRepository(self.session)
        self.wishlist_items = WishlistItemRepository(self.session)
        self.products = ProductRepository(self.session)
        self.coupons = CouponRepository(self.session)
        self.addresses = AddressRepository(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        """Commit the transaction.

        Raises:
            ConcurrencyConflictError: If a unique constraint was violated.
        """
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Unit of work commit conflicted", error=str(e.orig))
            raise ConcurrencyConflictError("transaction", str(e.orig)) from e

    async def rollback(self) -> None:
        await self.session.rollback()
