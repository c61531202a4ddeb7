"""Cart calculation service.

Loads a cart snapshot and the addresses it is priced for, then runs
the pricing pipeline. Read-only.
"""

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.exceptions import AddressNotFoundError, CartNotFoundError
from storefront.domain.value_objects import AddressId, AddressInfo, UserId
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.pricing.aggregator import CartAggregator, CartCalculationResult
from storefront.pricing.config import PricingConfig

logger = structlog.get_logger()


class CalculationService:
    """Application service computing cart totals."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: PricingConfig | None = None,
        aggregator: CartAggregator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._config = config or PricingConfig()
        self._aggregator = aggregator or CartAggregator(self._config)

    async def _resolve_address(
        self,
        uow: UnitOfWork,
        address_id: AddressId | None,
        user_id: UserId,
    ) -> AddressInfo | None:
        if address_id is None:
            return None
        address = await uow.addresses.get_for_user(address_id, user_id)
        if address is None:
            raise AddressNotFoundError(str(address_id), str(user_id))
        return address

    async def calculate_cart_totals(
        self,
        user_id: UserId,
        billing_address_id: AddressId | None = None,
        shipping_address_id: AddressId | None = None,
        now: datetime | None = None,
    ) -> CartCalculationResult:
        """Calculate totals of the user's cart.

        When only one address is given it serves as both billing and
        shipping address.

        Args:
            user_id: Owner of the cart.
            billing_address_id: Billing address of the user.
            shipping_address_id: Shipping address of the user.
            now: Evaluation time, defaults to the current time.

        Returns:
            CartCalculationResult.

        Raises:
            CartNotFoundError: If the user has no cart.
            AddressNotFoundError: If an address id does not belong to the user.
            CartCalculationError: If a pricing stage fails.
        """
        async with UnitOfWork(self._session_factory) as uow:
            cart = await uow.carts.get_by_user(user_id)
            if cart is None:
                raise CartNotFoundError(str(user_id))
            billing = await self._resolve_address(uow, billing_address_id, user_id)
            shipping = await self._resolve_address(uow, shipping_address_id, user_id)

        billing = billing or shipping
        shipping = shipping or billing

        result = self._aggregator.calculate(cart, billing, shipping, now)

        logger.info(
            "Cart totals calculated",
            cart_id=str(cart.id),
            user_id=str(user_id),
            total=str(result.total),
            rejected_coupons=[c.code for c in result.rejected_coupons],
        )
        return result
