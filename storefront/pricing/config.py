"""Pricing configuration.

Immutable snapshot of the tax and shipping options a calculation runs
with, built from application settings by the composition root.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from storefront.domain.value_objects import AddressInfo, TaxBasis

if TYPE_CHECKING:
    from storefront.infrastructure.config import Settings


@dataclass(frozen=True)
class PricingConfig:
    """Options consumed by the pricing pipeline.

    Attributes:
        currency: ISO 4217 code reported on every result.
        tax_rate: Default tax rate in percent.
        tax_label: Label of the tax breakdown line.
        tax_based_on: Which address governs the tax rate.
        regional_tax_rates: Rates keyed by ``CC`` or ``CC-STATE``.
        prices_include_tax: Reported only; prices are always treated as net.
        flat_rate_cost: Cost of the flat rate shipping method.
        free_shipping_threshold: Post-discount subtotal unlocking free shipping.
        shipping_countries: Countries shipped to; empty means everywhere.
        store_address: Address used when taxing by store address.
        max_cart_lines: Upper bound of lines per cart.
        max_coupons: Upper bound of coupons per cart.
    """

    currency: str = "USD"
    tax_rate: Decimal = Decimal("8.5")
    tax_label: str = "Sales Tax"
    tax_based_on: TaxBasis = TaxBasis.SHIPPING_ADDRESS
    regional_tax_rates: dict[str, Decimal] = field(default_factory=dict)
    prices_include_tax: bool = False
    flat_rate_cost: Decimal = Decimal("9.99")
    free_shipping_threshold: Decimal = Decimal("50.00")
    shipping_countries: frozenset[str] = frozenset()
    store_address: AddressInfo | None = None
    max_cart_lines: int = 100
    max_coupons: int = 10

    def rate_for(self, address: AddressInfo) -> Decimal:
        """Resolve the tax rate for an address, most specific first.

        Args:
            address: Address the tax is computed for.

        Returns:
            Rate in percent.
        """
        if address.region_key and address.region_key in self.regional_tax_rates:
            return self.regional_tax_rates[address.region_key]
        return self.regional_tax_rates.get(address.country, self.tax_rate)

    def ships_to(self, address: AddressInfo) -> bool:
        return not self.shipping_countries or address.country in self.shipping_countries

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PricingConfig":
        """Build pricing configuration from application settings.

        Args:
            settings: Loaded application settings.

        Returns:
            PricingConfig instance.
        """
        store_address = None
        if settings.store_address_line1 and settings.store_city:
            store_address = AddressInfo(
                line1=settings.store_address_line1,
                city=settings.store_city,
                state=settings.store_state,
                postal_code=settings.store_postal_code or "",
                country=settings.store_country,
            )

        return cls(
            currency=settings.currency,
            tax_rate=Decimal(str(settings.tax_rate)),
            tax_label=settings.tax_label,
            tax_based_on=settings.tax_based_on,
            regional_tax_rates={
                key.upper(): Decimal(str(rate))
                for key, rate in settings.regional_tax_rates.items()
            },
            prices_include_tax=settings.prices_include_tax,
            flat_rate_cost=Decimal(str(settings.flat_rate_cost)),
            free_shipping_threshold=Decimal(str(settings.free_shipping_threshold)),
            shipping_countries=frozenset(c.upper() for c in settings.shipping_countries),
            store_address=store_address,
            max_cart_lines=settings.max_cart_lines,
            max_coupons=settings.max_coupons,
        )
