"""Coupon stage.

Computes the discount of the coupons attached to a cart.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from storefront.domain.entities import Coupon
from storefront.domain.value_objects import ZERO, CouponId, DiscountType, round_cents


@dataclass(frozen=True)
class AppliedCoupon:
    """A coupon that contributed to the discount."""

    id: CouponId
    code: str
    description: str | None
    discount_type: DiscountType
    discount_value: Decimal
    amount: Decimal
    free_shipping: bool


@dataclass(frozen=True)
class RejectedCoupon:
    """A coupon attached to the cart that does not apply to it."""

    id: CouponId
    code: str
    reason: str


@dataclass(frozen=True)
class CouponResult:
    """Output of the coupon stage.

    Attributes:
        total_discount: Sum of coupon discounts, never above the subtotal.
        discount_tax: Tax share of the discount (always zero).
        applied_coupons: Coupons that were evaluated, in code order.
        rejected_coupons: Coupons skipped as expired, exhausted or below their
            minimum spend.
    """

    total_discount: Decimal
    discount_tax: Decimal
    applied_coupons: tuple[AppliedCoupon, ...]
    rejected_coupons: tuple[RejectedCoupon, ...]

    @property
    def grants_free_shipping(self) -> bool:
        return any(c.free_shipping for c in self.applied_coupons)


class CouponEngine:
    """Evaluates coupon rules against an items subtotal."""

    def discount_for(self, coupon: Coupon, subtotal: Decimal) -> Decimal:
        """Compute the discount one coupon yields.

        Args:
            coupon: Coupon with a well-formed rule.
            subtotal: Items subtotal.

        Returns:
            Discount rounded to the cent.
        """
        if coupon.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal * coupon.discount_value / 100
        else:
            discount = coupon.discount_value

        if coupon.minimum_spend is not None and subtotal < coupon.minimum_spend:
            return ZERO
        if coupon.maximum_spend is not None and discount > coupon.maximum_spend:
            discount = coupon.maximum_spend
        return round_cents(discount)

    def calculate(
        self,
        coupons: list[Coupon],
        subtotal: Decimal,
        now: datetime,
    ) -> CouponResult:
        """Apply the attached coupons to a subtotal.

        Args:
            coupons: Coupons attached to the cart.
            subtotal: Items subtotal.
            now: Evaluation time for expiry checks.

        Returns:
            CouponResult with the clamped total discount.

        Raises:
            InvalidCouponRuleError: If a coupon's rule is malformed.
        """
        applied: list[AppliedCoupon] = []
        rejected: list[RejectedCoupon] = []
        total = ZERO

        for coupon in sorted(coupons, key=lambda c: (c.code, str(c.id))):
            coupon.validate_rule()
            if coupon.is_expired(now):
                rejected.append(RejectedCoupon(coupon.id, coupon.code, "expired"))
                continue
            if coupon.is_exhausted(attached=True):
                rejected.append(RejectedCoupon(coupon.id, coupon.code, "usage limit reached"))
                continue
            if coupon.minimum_spend is not None and subtotal < coupon.minimum_spend:
                rejected.append(RejectedCoupon(coupon.id, coupon.code, "minimum spend not met"))
                continue

            amount = self.discount_for(coupon, subtotal)
            total += amount
            applied.append(
                AppliedCoupon(
                    id=coupon.id,
                    code=coupon.code,
                    description=coupon.description,
                    discount_type=coupon.discount_type,
                    discount_value=coupon.discount_value,
                    amount=amount,
                    free_shipping=coupon.free_shipping,
                )
            )

        return CouponResult(
            total_discount=min(total, max(subtotal, ZERO)),
            discount_tax=ZERO,
            applied_coupons=tuple(applied),
            rejected_coupons=tuple(rejected),
        )
