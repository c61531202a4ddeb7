"""Tests for the item pricing stage."""

from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.domain import CartItem, CartItemId, DeliveryType, ProductId, VariationId
from storefront.domain.exceptions import MissingPriceError, ProductNotFoundError, ProductVariationNotFoundError
from storefront.pricing import ItemPricingPipeline

RATE = Decimal("8.5")


class TestItemPricingPipeline:
    """Tests for ItemPricingPipeline."""

    def test_line_total(self, make_product, make_item) -> None:
        """Line total is unit price times quantity."""
        line = ItemPricingPipeline().price_item(make_item(make_product(price="19.99"), 3), RATE)

        assert line.unit_price == Decimal("19.99")
        assert line.line_total == Decimal("59.97")
        assert line.line_total_tax == Decimal("5.10")
        assert line.line_total_with_tax == Decimal("65.07")

    def test_sale_price_line(self, make_product, make_item) -> None:
        """Sale price flows into the line total."""
        line = ItemPricingPipeline().price_item(
            make_item(make_product(price="100.00", sale="80.00"), 2), RATE
        )

        assert line.line_total == Decimal("160.00")
        assert line.regular_price == Decimal("100.00")
        assert line.sale_price == Decimal("80.00")

    def test_variation_overrides_product_fields(self, make_product, make_variation, make_item) -> None:
        """Variation values win, missing ones fall back to the product."""
        product = make_product(sku="TSHIRT", shipping_class="apparel", weight=Decimal("0.2"))
        variation = make_variation(product, "v-xl", price="28.00", sku="TSHIRT-XL")

        line = ItemPricingPipeline().price_item(make_item(product, 1, variation), RATE)

        assert line.name == "Product p1 / v-xl"
        assert line.sku == "TSHIRT-XL"
        assert line.unit_price == Decimal("28.00")
        assert line.shipping_class == "apparel"
        assert line.weight == Decimal("0.2")
        assert line.needs_shipping

    def test_downloadable_line_does_not_ship(self, make_product, make_item) -> None:
        product = make_product(delivery_types=frozenset({DeliveryType.DOWNLOADABLE}))
        line = ItemPricingPipeline().price_item(make_item(product), RATE)

        assert not line.needs_shipping

    def test_variation_delivery_types_decide_shipping(self, make_product, make_variation, make_item) -> None:
        """A digital variation of a physical product does not ship."""
        product = make_product()
        variation = make_variation(
            product, "v-pdf", delivery_types=frozenset({DeliveryType.DOWNLOADABLE})
        )

        line = ItemPricingPipeline().price_item(make_item(product, 1, variation), RATE)

        assert line.delivery_types == frozenset({DeliveryType.DOWNLOADABLE})
        assert not line.needs_shipping

    def test_missing_product_snapshot(self) -> None:
        """Items whose product is gone fail the stage."""
        item = CartItem(id=CartItemId.generate(), product_id=ProductId("gone"), quantity=1)

        with pytest.raises(ProductNotFoundError):
            ItemPricingPipeline().price_item(item, RATE)

    def test_missing_variation_snapshot(self, make_product) -> None:
        item = CartItem(
            id=CartItemId.generate(),
            product_id=ProductId("p1"),
            variation_id=VariationId("gone"),
            quantity=1,
            product=make_product(),
        )

        with pytest.raises(ProductVariationNotFoundError):
            ItemPricingPipeline().price_item(item, RATE)

    def test_missing_price(self, make_product, make_item) -> None:
        with pytest.raises(MissingPriceError):
            ItemPricingPipeline().price_item(make_item(make_product(price=None)), RATE)

    def test_subtotal_sums_lines(self, make_product, make_item, now) -> None:
        """Subtotal is the sum of pre-tax line totals."""
        items = [
            make_item(make_product("p1", price="10.00"), 2),
            make_item(make_product("p2", price="5.50"), 1),
        ]

        result = ItemPricingPipeline().calculate(items, RATE, now)

        assert result.items_subtotal == Decimal("25.50")
        assert result.items_subtotal_tax == sum(line.line_total_tax for line in result.lines)
        assert result.items_subtotal_with_tax == result.items_subtotal + result.items_subtotal_tax

    def test_lines_in_insertion_order(self, make_product, make_item, now) -> None:
        """Lines come out oldest first regardless of input order."""
        newer = make_item(make_product("p-new"), added_at=now)
        older = make_item(make_product("p-old"), added_at=now - timedelta(minutes=5))

        result = ItemPricingPipeline().calculate([newer, older], RATE, now)

        assert [line.product_id for line in result.lines] == [ProductId("p-old"), ProductId("p-new")]

    def test_empty_cart(self, now) -> None:
        result = ItemPricingPipeline().calculate([], RATE, now)

        assert result.lines == ()
        assert result.items_subtotal == Decimal("0")
