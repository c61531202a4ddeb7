"""Item pricing stage.

Turns cart items into priced lines and sums the items subtotal.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from storefront.domain.entities import CartItem, Product, ProductVariation
from storefront.domain.exceptions import ProductNotFoundError, ProductVariationNotFoundError
from storefront.domain.value_objects import (
    ZERO,
    CartItemId,
    DeliveryType,
    ProductId,
    VariationId,
    round_cents,
)
from storefront.pricing.prices import PriceResolver


@dataclass(frozen=True)
class CartItemCalculation:
    """A priced cart line.

    ``line_total_tax`` is the line's share of tax at the rate the caller
    passes in (the tax address rate, or the default rate without one).
    It is informational; the cart-level tax stage is authoritative.
    """

    item_id: CartItemId
    product_id: ProductId
    variation_id: VariationId | None
    name: str
    sku: str | None
    quantity: int
    unit_price: Decimal
    regular_price: Decimal
    sale_price: Decimal | None
    line_total: Decimal
    line_total_tax: Decimal
    line_total_with_tax: Decimal
    tax_class: str | None
    tax_status: str | None
    shipping_class: str | None
    delivery_types: frozenset[DeliveryType]
    needs_shipping: bool
    weight: Decimal | None = None
    weight_unit: str | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    dimension_unit: str | None = None


@dataclass(frozen=True)
class ItemsResult:
    """Output of the item pricing stage."""

    lines: tuple[CartItemCalculation, ...]
    items_subtotal: Decimal
    items_subtotal_tax: Decimal
    items_subtotal_with_tax: Decimal


def _fallback(variation: ProductVariation | None, product: Product, attr: str) -> Any:
    """Variation value if set, else the product's."""
    if variation is not None:
        value = getattr(variation, attr)
        if value is not None:
            return value
    return getattr(product, attr)


def ordered_items(items: list[CartItem]) -> list[CartItem]:
    """Cart items in insertion order, ties broken by id."""
    return sorted(items, key=lambda i: (i.added_at, str(i.id)))


class ItemPricingPipeline:
    """Prices every cart line and accumulates the subtotal."""

    def __init__(self, price_resolver: PriceResolver | None = None) -> None:
        self._prices = price_resolver or PriceResolver()

    def price_item(
        self,
        item: CartItem,
        tax_rate: Decimal,
        now: datetime | None = None,
    ) -> CartItemCalculation:
        """Price a single cart line.

        Args:
            item: Cart item with product and variation snapshots loaded.
            tax_rate: Rate in percent used for the informational line tax.
            now: Evaluation time for scheduled sales.

        Returns:
            CartItemCalculation for the line.

        Raises:
            ProductNotFoundError: If the product snapshot is missing.
            ProductVariationNotFoundError: If the variation snapshot is missing.
            MissingPriceError: If the price source has no regular price.
        """
        product = item.product
        if product is None:
            raise ProductNotFoundError(str(item.product_id))
        variation = item.variation
        if item.variation_id is not None and variation is None:
            raise ProductVariationNotFoundError(str(item.product_id), str(item.variation_id))

        price = self._prices.resolve(product, variation, now)
        delivery_source = (
            variation if variation is not None and variation.delivery_types is not None else product
        )
        line_total = round_cents(price.unit_price * item.quantity)
        line_total_tax = round_cents(line_total * tax_rate / 100)

        return CartItemCalculation(
            item_id=item.id,
            product_id=item.product_id,
            variation_id=item.variation_id,
            name=variation.name if variation is not None and variation.name else product.name,
            sku=_fallback(variation, product, "sku"),
            quantity=item.quantity,
            unit_price=price.unit_price,
            regular_price=price.regular_price,
            sale_price=price.sale_price,
            line_total=line_total,
            line_total_tax=line_total_tax,
            line_total_with_tax=line_total + line_total_tax,
            tax_class=_fallback(variation, product, "tax_class"),
            tax_status=_fallback(variation, product, "tax_status"),
            shipping_class=_fallback(variation, product, "shipping_class"),
            delivery_types=frozenset(delivery_source.delivery_types or ()),
            needs_shipping=delivery_source.is_physical,
            weight=_fallback(variation, product, "weight"),
            weight_unit=_fallback(variation, product, "weight_unit"),
            length=_fallback(variation, product, "length"),
            width=_fallback(variation, product, "width"),
            height=_fallback(variation, product, "height"),
            dimension_unit=_fallback(variation, product, "dimension_unit"),
        )

    def calculate(
        self,
        items: list[CartItem],
        tax_rate: Decimal,
        now: datetime | None = None,
    ) -> ItemsResult:
        """Price all lines of a cart.

        Args:
            items: Live cart items.
            tax_rate: Rate in percent for the informational line tax.
            now: Evaluation time for scheduled sales.

        Returns:
            ItemsResult with ordered lines and subtotals.
        """
        lines = tuple(self.price_item(item, tax_rate, now) for item in ordered_items(items))
        return ItemsResult(
            lines=lines,
            items_subtotal=sum((line.line_total for line in lines), ZERO),
            items_subtotal_tax=sum((line.line_total_tax for line in lines), ZERO),
            items_subtotal_with_tax=sum((line.line_total_with_tax for line in lines), ZERO),
        )
