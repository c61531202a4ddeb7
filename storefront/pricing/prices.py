"""Price resolution for products and variations."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from storefront.domain.entities import CatalogEntry, Product, ProductVariation
from storefront.domain.exceptions import MissingPriceError
from storefront.domain.value_objects import ZERO


@dataclass(frozen=True)
class ResolvedPrice:
    """Prices that apply to one product selection.

    Attributes:
        unit_price: Price charged per unit.
        regular_price: Catalog price of the price source.
        sale_price: Sale price, set only when it is in effect.
    """

    unit_price: Decimal
    regular_price: Decimal
    sale_price: Decimal | None = None

    @property
    def on_sale(self) -> bool:
        return self.sale_price is not None


class PriceResolver:
    """Chooses the effective unit price of a product or variation.

    The price source is the variation when one is attached, otherwise
    the product. A variation never borrows its parent's price.
    """

    def resolve(
        self,
        product: Product,
        variation: ProductVariation | None = None,
        now: datetime | None = None,
    ) -> ResolvedPrice:
        """Resolve the effective price.

        Args:
            product: Product of the line.
            variation: Variation of the line, if any.
            now: Evaluation time for scheduled sales.

        Returns:
            ResolvedPrice for the selection.

        Raises:
            MissingPriceError: If the price source has no regular price.
        """
        source: CatalogEntry = variation if variation is not None else product
        if source.regular_price is None:
            raise MissingPriceError(
                str(product.id),
                str(variation.id) if variation is not None else None,
            )

        if self._sale_active(source, now):
            return ResolvedPrice(
                unit_price=source.sale_price,
                regular_price=source.regular_price,
                sale_price=source.sale_price,
            )
        return ResolvedPrice(unit_price=source.regular_price, regular_price=source.regular_price)

    @staticmethod
    def _sale_active(source: CatalogEntry, now: datetime | None) -> bool:
        if source.sale_price is None or source.sale_price <= ZERO:
            return False
        if now is None:
            return True
        if source.sale_price_start_at is not None and now < source.sale_price_start_at:
            return False
        if source.sale_price_end_at is not None and now > source.sale_price_end_at:
            return False
        return True

