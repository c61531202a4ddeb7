"""Shipping stage.

Decides whether a cart ships, which methods are offered and what the
chosen method costs.
"""

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.value_objects import ZERO, AddressInfo
from storefront.pricing.config import PricingConfig
from storefront.pricing.items import CartItemCalculation

FLAT_RATE_ID = "flat-rate"
FREE_SHIPPING_ID = "free-shipping"


@dataclass(frozen=True)
class ShippingMethod:
    """A shipping option offered for the cart."""

    id: str
    label: str
    cost: Decimal
    method_id: str
    selected: bool = False


@dataclass(frozen=True)
class ShippingDetails:
    """Output of the shipping stage.

    Attributes:
        total: Cost of the selected method.
        tax: Shipping tax (always zero).
        methods: Candidate methods, the selected one flagged.
        free_shipping_threshold: Threshold the cart was measured against.
        free_shipping_remaining: Amount missing to reach free shipping; zero
            when the cart is not shipped.
        needs_shipping: Whether any line is a physical good.
        can_ship_to_address: Whether the address is serviceable.
    """

    total: Decimal
    tax: Decimal
    methods: tuple[ShippingMethod, ...]
    free_shipping_threshold: Decimal
    free_shipping_remaining: Decimal
    needs_shipping: bool
    can_ship_to_address: bool

    @property
    def selected_method(self) -> ShippingMethod | None:
        return next((m for m in self.methods if m.selected), None)


class ShippingResolver:
    """Resolves shipping cost from the configured flat rate and free shipping threshold."""

    def __init__(self, config: PricingConfig) -> None:
        self._config = config

    @staticmethod
    def needs_shipping(lines: tuple[CartItemCalculation, ...]) -> bool:
        return any(line.needs_shipping for line in lines)

    def calculate(
        self,
        lines: tuple[CartItemCalculation, ...],
        subtotal_after_coupons: Decimal,
        shipping_address: AddressInfo | None,
        coupon_free_shipping: bool = False,
    ) -> ShippingDetails:
        """Resolve shipping for a priced cart.

        Args:
            lines: Priced cart lines.
            subtotal_after_coupons: Items subtotal minus the coupon discount.
            shipping_address: Destination, if known.
            coupon_free_shipping: Whether an applied coupon grants free shipping.

        Returns:
            ShippingDetails with the selected method.
        """
        threshold = self._config.free_shipping_threshold
        needs_shipping = self.needs_shipping(lines)
        can_ship = shipping_address is not None and self._config.ships_to(shipping_address)
        free_applies = coupon_free_shipping or subtotal_after_coupons >= threshold

        if not needs_shipping or not can_ship:
            return ShippingDetails(
                total=ZERO,
                tax=ZERO,
                methods=(),
                free_shipping_threshold=threshold,
                free_shipping_remaining=ZERO,
                needs_shipping=needs_shipping,
                can_ship_to_address=can_ship,
            )

        methods = [
            ShippingMethod(
                id=FLAT_RATE_ID,
                label="Flat Rate Shipping",
                cost=self._config.flat_rate_cost,
                method_id=FLAT_RATE_ID,
                selected=not free_applies,
            )
        ]
        if free_applies:
            methods.append(
                ShippingMethod(
                    id=FREE_SHIPPING_ID,
                    label="Free Shipping",
                    cost=ZERO,
                    method_id=FREE_SHIPPING_ID,
                    selected=True,
                )
            )

        remaining = ZERO if free_applies else max(ZERO, threshold - subtotal_after_coupons)
        total = ZERO if free_applies else self._config.flat_rate_cost
        return ShippingDetails(
            total=total,
            tax=ZERO,
            methods=tuple(methods),
            free_shipping_threshold=threshold,
            free_shipping_remaining=remaining,
            needs_shipping=needs_shipping,
            can_ship_to_address=can_ship,
        )
