"""Tests for domain entities."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain import (
    Cart,
    CartItem,
    CartItemId,
    Coupon,
    CouponId,
    DeliveryType,
    DiscountType,
    ItemIdentity,
    MergeAction,
    Product,
    ProductId,
    UserId,
    VariationId,
    Wishlist,
    WishlistItemId,
)
from storefront.domain.exceptions import (
    AmbiguousCartItemError,
    CartItemNotFoundError,
    CartLimitExceededError,
    CouponNotApplicableError,
    InvalidCouponRuleError,
    InvalidQuantityError,
    WishlistItemNotFoundError,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Test Fixtures
# ============================================================================


def make_cart() -> Cart:
    """Create an empty test cart."""
    return Cart.create(user_id=UserId("user-1"))


def make_coupon(
    code: str = "SAVE10",
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "10",
    **kwargs,
) -> Coupon:
    """Create a test coupon."""
    return Coupon(
        id=CouponId(f"coupon-{code.lower()}"),
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        **kwargs,
    )


def identity(product: str, variation: str | None = None) -> ItemIdentity:
    return ItemIdentity(ProductId(product), VariationId(variation) if variation else None)


# ============================================================================
# Catalog Tests
# ============================================================================


class TestProduct:
    """Tests for product snapshots."""

    def test_physical_product(self) -> None:
        """Products flagged physical need shipping."""
        product = Product(
            id=ProductId("p1"),
            name="Mug",
            regular_price=Decimal("10.00"),
            delivery_types=frozenset({DeliveryType.PHYSICAL}),
        )
        assert product.is_physical

    def test_downloadable_product(self) -> None:
        """Products without the physical flag do not ship."""
        product = Product(
            id=ProductId("p1"),
            name="E-Book",
            regular_price=Decimal("10.00"),
            delivery_types=frozenset({DeliveryType.DOWNLOADABLE}),
        )
        assert not product.is_physical

    def test_no_delivery_types(self) -> None:
        """Missing delivery types means not physical."""
        product = Product(id=ProductId("p1"), name="Gift", regular_price=Decimal("5.00"))
        assert not product.is_physical


# ============================================================================
# Cart Tests
# ============================================================================


class TestCartItem:
    """Tests for CartItem entity."""

    def test_create_cart_item(self) -> None:
        """Cart item can be created with a positive quantity."""
        item = CartItem(id=CartItemId.generate(), product_id=ProductId("p1"), quantity=2)
        assert item.quantity == 2
        assert item.identity == identity("p1")

    def test_zero_quantity_raises_error(self) -> None:
        """Zero quantity raises InvalidQuantityError."""
        with pytest.raises(InvalidQuantityError):
            CartItem(id=CartItemId.generate(), product_id=ProductId("p1"), quantity=0)

    def test_update_quantity_returns_previous(self) -> None:
        """Updating quantity returns the old value."""
        item = CartItem(id=CartItemId.generate(), product_id=ProductId("p1"), quantity=2)
        assert item.update_quantity(5) == 2
        assert item.quantity == 5

    def test_update_quantity_negative_raises_error(self) -> None:
        """Negative quantity is rejected."""
        item = CartItem(id=CartItemId.generate(), product_id=ProductId("p1"), quantity=2)
        with pytest.raises(InvalidQuantityError):
            item.update_quantity(-1)
        assert item.quantity == 2


class TestCartMerge:
    """Tests for merge-on-add."""

    def test_new_line_created(self) -> None:
        """Adding an unknown product creates a line."""
        cart = make_cart()
        result = cart.merge_item(identity("p1"), 2)

        assert result.action == MergeAction.CREATED
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_exact_match_overwrites_quantity(self) -> None:
        """Re-adding the same identity replaces the quantity, never sums."""
        cart = make_cart()
        cart.merge_item(identity("p1"), 2)
        result = cart.merge_item(identity("p1"), 3)

        assert result.action == MergeAction.UPDATED
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_merge_converges(self) -> None:
        """Repeated adds of one identity always leave a single line with the last quantity."""
        cart = make_cart()
        for quantity in (1, 4, 2, 7):
            cart.merge_item(identity("p1", "v1"), quantity)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 7

    def test_base_line_promoted_to_variation(self) -> None:
        """A base product line becomes the requested variation."""
        cart = make_cart()
        original = cart.merge_item(identity("p1"), 1).item
        result = cart.merge_item(identity("p1", "v-red"), 3)

        assert result.action == MergeAction.PROMOTED
        assert result.item.id == original.id
        assert len(cart.items) == 1
        assert cart.items[0].variation_id == VariationId("v-red")
        assert cart.items[0].quantity == 3

    def test_other_variation_gets_own_line(self) -> None:
        """Two variations of one product are separate lines."""
        cart = make_cart()
        cart.merge_item(identity("p1", "v-red"), 1)
        result = cart.merge_item(identity("p1", "v-blue"), 2)

        assert result.action == MergeAction.CREATED
        assert len(cart.items) == 2

    def test_base_request_does_not_touch_variation_line(self) -> None:
        """Adding the base product next to a variation line creates a new line."""
        cart = make_cart()
        cart.merge_item(identity("p1", "v-red"), 1)
        result = cart.merge_item(identity("p1"), 2)

        assert result.action == MergeAction.CREATED
        assert len(cart.items) == 2

    def test_identity_keys_unique(self) -> None:
        """No two lines ever share an identity."""
        cart = make_cart()
        for key in [("p1", None), ("p1", "v1"), ("p2", None), ("p1", "v1"), ("p1", None)]:
            cart.merge_item(identity(*key), 1)

        identities = [item.identity for item in cart.items]
        assert len(identities) == len(set(identities))

    def test_invalid_quantity_rejected(self) -> None:
        """Non-positive quantities never mutate the cart."""
        cart = make_cart()
        with pytest.raises(InvalidQuantityError):
            cart.merge_item(identity("p1"), 0)
        assert cart.is_empty

    def test_line_limit(self) -> None:
        """New lines beyond max_lines are rejected; updates are still allowed."""
        cart = make_cart()
        cart.merge_item(identity("p1"), 1, max_lines=2)
        cart.merge_item(identity("p2"), 1, max_lines=2)

        with pytest.raises(CartLimitExceededError):
            cart.merge_item(identity("p3"), 1, max_lines=2)

        cart.merge_item(identity("p2"), 5, max_lines=2)
        assert cart.item_count == 6


class TestCartUpdateAndRemove:
    """Tests for quantity updates and removals."""

    def test_update_single_line(self) -> None:
        """Product id alone resolves the only line."""
        cart = make_cart()
        cart.merge_item(identity("p1", "v1"), 1)
        item = cart.update_item_quantity(ProductId("p1"), 4)

        assert item.quantity == 4

    def test_update_ambiguous(self) -> None:
        """Several lines without a variation id are ambiguous."""
        cart = make_cart()
        cart.merge_item(identity("p1", "v1"), 1)
        cart.merge_item(identity("p1", "v2"), 1)

        with pytest.raises(AmbiguousCartItemError):
            cart.update_item_quantity(ProductId("p1"), 4)

    def test_update_with_variation(self) -> None:
        """Variation id disambiguates the line."""
        cart = make_cart()
        cart.merge_item(identity("p1", "v1"), 1)
        cart.merge_item(identity("p1", "v2"), 1)
        item = cart.update_item_quantity(ProductId("p1"), 4, VariationId("v2"))

        assert item.variation_id == VariationId("v2")
        assert item.quantity == 4

    def test_update_missing_product(self) -> None:
        """Unknown product raises CartItemNotFoundError."""
        cart = make_cart()
        with pytest.raises(CartItemNotFoundError):
            cart.update_item_quantity(ProductId("p1"), 1)

    def test_remove_items(self) -> None:
        """Lines are removed by cart-item id."""
        cart = make_cart()
        first = cart.merge_item(identity("p1"), 1).item
        cart.merge_item(identity("p2"), 1)

        removed = cart.remove_items([first.id])

        assert removed == [first]
        assert [item.product_id for item in cart.items] == [ProductId("p2")]

    def test_remove_all_or_nothing(self) -> None:
        """An unknown id leaves every line in place."""
        cart = make_cart()
        first = cart.merge_item(identity("p1"), 1).item

        with pytest.raises(CartItemNotFoundError):
            cart.remove_items([first.id, CartItemId("missing")])
        assert len(cart.items) == 1


class TestCartCoupons:
    """Tests for coupon attachment."""

    def test_attach_coupon(self) -> None:
        cart = make_cart()
        assert cart.attach_coupon(make_coupon()) is True
        assert cart.has_coupon(CouponId("coupon-save10"))

    def test_attach_twice_is_noop(self) -> None:
        """Attaching an already attached coupon changes nothing."""
        cart = make_cart()
        coupon = make_coupon()
        cart.attach_coupon(coupon)

        assert cart.attach_coupon(coupon) is False
        assert len(cart.coupons) == 1

    def test_coupon_limit(self) -> None:
        """Coupons beyond max_coupons are rejected."""
        cart = make_cart()
        cart.attach_coupon(make_coupon("A"), max_coupons=1)
        with pytest.raises(CartLimitExceededError):
            cart.attach_coupon(make_coupon("B"), max_coupons=1)


# ============================================================================
# Coupon Tests
# ============================================================================


class TestCoupon:
    """Tests for coupon rules."""

    def test_percentage_above_hundred_is_malformed(self) -> None:
        coupon = make_coupon(value="150")
        with pytest.raises(InvalidCouponRuleError):
            coupon.validate_rule()

    def test_negative_value_is_malformed(self) -> None:
        coupon = make_coupon(discount_type=DiscountType.FIXED_CART, value="-5")
        with pytest.raises(InvalidCouponRuleError):
            coupon.validate_rule()

    def test_maximum_below_minimum_is_malformed(self) -> None:
        coupon = make_coupon(minimum_spend=Decimal("50"), maximum_spend=Decimal("10"))
        assert coupon.rule_violation() == "maximum spend is lower than minimum spend"

    def test_expired(self) -> None:
        coupon = make_coupon(expiry_date=NOW - timedelta(days=1))
        assert coupon.is_expired(NOW)
        with pytest.raises(CouponNotApplicableError):
            coupon.ensure_applicable(NOW)

    def test_exhausted_before_attach(self) -> None:
        """A coupon with no uses left cannot be attached."""
        coupon = make_coupon(max_usage=2, usage_count=2)
        assert coupon.is_exhausted()
        with pytest.raises(CouponNotApplicableError):
            coupon.ensure_applicable(NOW)

    def test_attached_use_is_counted(self) -> None:
        """A cart holding the last use is not treated as over the limit."""
        coupon = make_coupon(max_usage=2, usage_count=2)
        assert not coupon.is_exhausted(attached=True)
        assert make_coupon(max_usage=2, usage_count=3).is_exhausted(attached=True)

    def test_email_restriction(self) -> None:
        """Restricted coupons only apply to listed emails, case-insensitively."""
        coupon = make_coupon(allowed_emails=("vip@example.com",))
        assert coupon.allows_email("VIP@example.com")
        assert not coupon.allows_email(None)
        with pytest.raises(CouponNotApplicableError):
            coupon.ensure_applicable(NOW, "other@example.com")


# ============================================================================
# Wishlist Tests
# ============================================================================


class TestWishlist:
    """Tests for Wishlist aggregate."""

    def test_add_item(self) -> None:
        wishlist = Wishlist.create(UserId("user-1"))
        item = wishlist.add_item(identity("p1"))

        assert item is not None
        assert len(wishlist.items) == 1

    def test_add_duplicate_is_noop(self) -> None:
        """The same identity is listed once."""
        wishlist = Wishlist.create(UserId("user-1"))
        wishlist.add_item(identity("p1", "v1"))

        assert wishlist.add_item(identity("p1", "v1")) is None
        assert len(wishlist.items) == 1

    def test_discard(self) -> None:
        """Discard removes an identity and ignores unknown ones."""
        wishlist = Wishlist.create(UserId("user-1"))
        wishlist.add_item(identity("p1"))

        assert wishlist.discard(identity("p2")) is None
        assert wishlist.discard(identity("p1")) is not None
        assert wishlist.items == []

    def test_remove_items_all_or_nothing(self) -> None:
        wishlist = Wishlist.create(UserId("user-1"))
        item = wishlist.add_item(identity("p1"))

        with pytest.raises(WishlistItemNotFoundError):
            wishlist.remove_items([item.id, WishlistItemId("missing")])
        assert len(wishlist.items) == 1

        assert wishlist.remove_items([item.id]) == [item]
