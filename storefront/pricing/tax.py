"""Tax stage."""

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.value_objects import ZERO, AddressInfo, TaxBasis, round_cents
from storefront.pricing.config import PricingConfig

DEFAULT_TAX_LINE_ID = "default-tax"


@dataclass(frozen=True)
class TaxLine:
    """One line of the tax breakdown."""

    id: str
    label: str
    rate: Decimal
    amount: Decimal
    taxable_amount: Decimal
    applies_to_shipping: bool = True
    is_compound: bool = False


@dataclass(frozen=True)
class TaxDetails:
    """Output of the tax stage."""

    total: Decimal
    breakdown: tuple[TaxLine, ...]
    address: AddressInfo | None


class TaxCalculator:
    """Computes cart-level tax on the discounted subtotal plus shipping."""

    def __init__(self, config: PricingConfig) -> None:
        self._config = config

    def tax_address(
        self,
        billing_address: AddressInfo | None,
        shipping_address: AddressInfo | None,
    ) -> AddressInfo | None:
        """Pick the address that governs the tax rate."""
        basis = self._config.tax_based_on
        if basis == TaxBasis.BILLING_ADDRESS:
            return billing_address
        if basis == TaxBasis.SHIPPING_ADDRESS:
            return shipping_address
        return self._config.store_address

    def calculate(
        self,
        subtotal_after_coupons: Decimal,
        shipping_total: Decimal,
        billing_address: AddressInfo | None,
        shipping_address: AddressInfo | None,
    ) -> TaxDetails:
        """Compute tax for a cart.

        Args:
            subtotal_after_coupons: Items subtotal minus the coupon discount.
            shipping_total: Cost of the selected shipping method.
            billing_address: Billing address, if known.
            shipping_address: Shipping address, if known.

        Returns:
            TaxDetails; zero with an empty breakdown when no address applies.
        """
        address = self.tax_address(billing_address, shipping_address)
        if address is None:
            return TaxDetails(total=ZERO, breakdown=(), address=None)

        rate = self._config.rate_for(address)
        taxable = subtotal_after_coupons + shipping_total
        amount = round_cents(taxable * rate / 100)

        line = TaxLine(
            id=DEFAULT_TAX_LINE_ID,
            label=self._config.tax_label,
            rate=rate,
            amount=amount,
            taxable_amount=taxable,
        )
        return TaxDetails(total=amount, breakdown=(line,), address=address)
