"""Tests for domain value objects."""

from decimal import Decimal

import pytest

from storefront.domain import (
    AddressInfo,
    CartId,
    ItemIdentity,
    ProductId,
    VariationId,
)
from storefront.domain.value_objects import round_cents


class TestRoundCents:
    """Tests for monetary rounding."""

    def test_rounds_half_up(self) -> None:
        """Half a cent rounds away from zero."""
        assert round_cents(Decimal("0.005")) == Decimal("0.01")
        assert round_cents(Decimal("2.675")) == Decimal("2.68")

    def test_rounds_down_below_half(self) -> None:
        """Less than half a cent is dropped."""
        assert round_cents(Decimal("15.3049")) == Decimal("15.30")

    def test_always_two_places(self) -> None:
        """Whole amounts are quantized to two decimals."""
        assert str(round_cents(Decimal("180"))) == "180.00"


class TestEntityId:
    """Tests for typed identifiers."""

    def test_generate_unique(self) -> None:
        """Generated ids are unique UUID strings."""
        first = CartId.generate()
        second = CartId.generate()
        assert first != second
        assert len(str(first)) == 36

    def test_empty_raises_error(self) -> None:
        """Empty or blank ids are rejected."""
        with pytest.raises(ValueError):
            ProductId("")
        with pytest.raises(ValueError):
            ProductId("   ")

    def test_distinct_types_not_equal(self) -> None:
        """Ids of different kinds never compare equal."""
        assert ProductId("abc") != VariationId("abc")

    def test_same_type_same_value_equal(self) -> None:
        """Ids are value objects."""
        assert ProductId("abc") == ProductId("abc")
        assert hash(ProductId("abc")) == hash(ProductId("abc"))


class TestItemIdentity:
    """Tests for the merge key of cart and wishlist lines."""

    def test_base_product_identity(self) -> None:
        """Identity without variation renders as the product id."""
        identity = ItemIdentity(ProductId("p1"))
        assert identity.variation_id is None
        assert str(identity) == "p1"

    def test_variation_identity(self) -> None:
        """Identity with variation includes both ids."""
        identity = ItemIdentity(ProductId("p1"), VariationId("v1"))
        assert str(identity) == "p1:v1"

    def test_null_variation_is_distinct_key(self) -> None:
        """A base product line and a variation line are different keys."""
        assert ItemIdentity(ProductId("p1")) != ItemIdentity(ProductId("p1"), VariationId("v1"))


class TestAddressInfo:
    """Tests for AddressInfo value object."""

    def test_normalizes_country_and_state(self) -> None:
        """Country and state are upper-cased."""
        address = AddressInfo(
            line1="350 5th Ave",
            city="New York",
            state="ny",
            postal_code="10118",
            country="us",
        )
        assert address.country == "US"
        assert address.state == "NY"

    def test_region_key(self) -> None:
        """Region key combines country and state."""
        address = AddressInfo(line1="1 Main St", city="Austin", state="TX", postal_code="73301")
        assert address.region_key == "US-TX"

    def test_region_key_without_state(self) -> None:
        """Addresses without a state have no region key."""
        address = AddressInfo(
            line1="Unter den Linden 1",
            city="Berlin",
            state=None,
            postal_code="10117",
            country="DE",
        )
        assert address.region_key is None

    def test_invalid_country_raises_error(self) -> None:
        """Country must be a two letter code."""
        with pytest.raises(ValueError):
            AddressInfo(line1="1 Main St", city="Austin", state="TX", postal_code="1", country="USA")

    def test_empty_city_raises_error(self) -> None:
        """City is required."""
        with pytest.raises(ValueError):
            AddressInfo(line1="1 Main St", city=" ", state="TX", postal_code="1")

    def test_format_single_line(self) -> None:
        """Address formats to one line."""
        address = AddressInfo(
            line1="350 5th Ave",
            line2="Floor 3",
            city="New York",
            state="NY",
            postal_code="10118",
        )
        assert address.format_single_line() == "350 5th Ave, Floor 3, New York, NY, 10118, US"
