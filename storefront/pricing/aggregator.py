"""Cart aggregator.

Runs the pricing stages in their fixed order and assembles the
cart calculation result.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import TypeVar

import structlog

from storefront.domain.entities import Cart
from storefront.domain.exceptions import CartCalculationError, CartLimitExceededError
from storefront.domain.value_objects import ZERO, AddressInfo, CartId, TaxBasis
from storefront.pricing.config import PricingConfig
from storefront.pricing.coupons import AppliedCoupon, CouponEngine, RejectedCoupon
from storefront.pricing.items import CartItemCalculation, ItemPricingPipeline
from storefront.pricing.shipping import ShippingDetails, ShippingResolver
from storefront.pricing.tax import TaxCalculator, TaxDetails

logger = structlog.get_logger()

R = TypeVar("R")


@dataclass(frozen=True)
class CartCalculationResult:
    """Totals of a cart at one point in time. Never persisted."""

    cart_id: CartId
    items: tuple[CartItemCalculation, ...]
    items_subtotal: Decimal
    items_subtotal_tax: Decimal
    items_subtotal_with_tax: Decimal
    subtotal: Decimal
    total_discount: Decimal
    discount_tax: Decimal
    applied_coupons: tuple[AppliedCoupon, ...]
    rejected_coupons: tuple[RejectedCoupon, ...]
    subtotal_after_coupons: Decimal
    shipping_total: Decimal
    shipping_tax: Decimal
    shipping_details: ShippingDetails
    tax_total: Decimal
    tax_details: TaxDetails
    total: Decimal
    billing_address: AddressInfo | None
    shipping_address: AddressInfo | None
    prices_include_tax: bool
    tax_based_on: TaxBasis
    currency: str
    needs_shipping: bool
    can_ship_to_address: bool
    calculated_at: datetime


class CartAggregator:
    """Composes items, coupons, shipping and tax into cart totals.

    The stages run strictly in order, each consuming the previous stage's
    output. A failure in any stage aborts the calculation with a single
    CartCalculationError naming the stage.
    """

    def __init__(
        self,
        config: PricingConfig,
        item_pipeline: ItemPricingPipeline | None = None,
        coupon_engine: CouponEngine | None = None,
        shipping_resolver: ShippingResolver | None = None,
        tax_calculator: TaxCalculator | None = None,
    ) -> None:
        self._config = config
        self._items = item_pipeline or ItemPricingPipeline()
        self._coupons = coupon_engine or CouponEngine()
        self._shipping = shipping_resolver or ShippingResolver(config)
        self._tax = tax_calculator or TaxCalculator(config)

    @staticmethod
    def _run_stage(cart_id: CartId, stage: str, fn: Callable[[], R]) -> R:
        try:
            return fn()
        except CartCalculationError:
            raise
        except Exception as e:
            logger.warning(
                "Cart calculation stage failed",
                cart_id=str(cart_id),
                stage=stage,
                error=str(e),
            )
            raise CartCalculationError(str(cart_id), stage, str(e)) from e

    def _check_bounds(self, cart: Cart) -> None:
        if len(cart.items) > self._config.max_cart_lines:
            raise CartLimitExceededError(str(cart.id), "max_cart_lines", self._config.max_cart_lines)
        if len(cart.coupons) > self._config.max_coupons:
            raise CartLimitExceededError(str(cart.id), "max_coupons", self._config.max_coupons)

    def calculate(
        self,
        cart: Cart,
        billing_address: AddressInfo | None = None,
        shipping_address: AddressInfo | None = None,
        now: datetime | None = None,
    ) -> CartCalculationResult:
        """Calculate cart totals.

        Args:
            cart: Cart snapshot with product data loaded on every item.
            billing_address: Resolved billing address.
            shipping_address: Resolved shipping address.
            now: Evaluation time; defaults to the current UTC time.

        Returns:
            CartCalculationResult.

        Raises:
            CartCalculationError: If any stage fails.
        """
        now = now or datetime.now(timezone.utc)
        cart_id = cart.id

        self._run_stage(cart_id, "bounds", lambda: self._check_bounds(cart))

        tax_address = self._tax.tax_address(billing_address, shipping_address)
        line_rate = (
            self._config.rate_for(tax_address) if tax_address is not None else self._config.tax_rate
        )
        items = self._run_stage(
            cart_id, "items", lambda: self._items.calculate(cart.items, line_rate, now)
        )
        subtotal = items.items_subtotal

        coupons = self._run_stage(
            cart_id, "coupons", lambda: self._coupons.calculate(cart.coupons, subtotal, now)
        )
        subtotal_after_coupons = subtotal - coupons.total_discount

        shipping = self._run_stage(
            cart_id,
            "shipping",
            lambda: self._shipping.calculate(
                items.lines,
                subtotal_after_coupons,
                shipping_address,
                coupons.grants_free_shipping,
            ),
        )

        tax = self._run_stage(
            cart_id,
            "tax",
            lambda: self._tax.calculate(
                subtotal_after_coupons,
                shipping.total,
                billing_address,
                shipping_address,
            ),
        )

        total = max(subtotal_after_coupons + shipping.total + tax.total, ZERO)

        logger.debug(
            "Cart totals calculated",
            cart_id=str(cart_id),
            lines=len(items.lines),
            subtotal=str(subtotal),
            discount=str(coupons.total_discount),
            shipping=str(shipping.total),
            tax=str(tax.total),
            total=str(total),
        )

        return CartCalculationResult(
            cart_id=cart_id,
            items=items.lines,
            items_subtotal=subtotal,
            items_subtotal_tax=items.items_subtotal_tax,
            items_subtotal_with_tax=items.items_subtotal_with_tax,
            subtotal=subtotal,
            total_discount=coupons.total_discount,
            discount_tax=coupons.discount_tax,
            applied_coupons=coupons.applied_coupons,
            rejected_coupons=coupons.rejected_coupons,
            subtotal_after_coupons=subtotal_after_coupons,
            shipping_total=shipping.total,
            shipping_tax=shipping.tax,
            shipping_details=shipping,
            tax_total=tax.total,
            tax_details=tax,
            total=total,
            billing_address=billing_address,
            shipping_address=shipping_address,
            prices_include_tax=self._config.prices_include_tax,
            tax_based_on=self._config.tax_based_on,
            currency=self._config.currency,
            needs_shipping=shipping.needs_shipping,
            can_ship_to_address=shipping.can_ship_to_address,
            calculated_at=now,
        )
