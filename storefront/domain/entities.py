"""Domain entities for the storefront cart engine.

Entities are domain objects with identity that persists across state changes.
This module contains the catalog snapshots the pricing pipeline reads
(Product, ProductVariation, Coupon) and the two aggregates whose merge
rules the cart and wishlist services drive (Cart, Wishlist).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.base import AggregateRoot, Entity
from storefront.domain.exceptions import (
    AmbiguousCartItemError,
    CartItemNotFoundError,
    CartLimitExceededError,
    CouponNotApplicableError,
    InvalidCouponRuleError,
    InvalidQuantityError,
    WishlistItemNotFoundError,
)
from storefront.domain.value_objects import (
    CartId,
    CartItemId,
    CouponId,
    DeliveryType,
    DiscountType,
    ItemIdentity,
    ProductId,
    UserId,
    VariationId,
    WishlistId,
    WishlistItemId,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Catalog Snapshots
# ============================================================================


@dataclass(kw_only=True, eq=False)
class CatalogEntry(Entity[str]):
    """Fields shared by products and their variations.

    Prices are in major currency units. ``sale_price`` only takes effect
    when it is greater than zero and, if a schedule is set, while the
    schedule is running.
    """

    name: str
    regular_price: Decimal | None
    sale_price: Decimal | None = None
    sale_price_start_at: datetime | None = None
    sale_price_end_at: datetime | None = None
    sku: str | None = None
    delivery_types: frozenset[DeliveryType] | None = None
    tax_class: str | None = None
    tax_status: str | None = None
    shipping_class: str | None = None
    weight: Decimal | None = None
    weight_unit: str | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    dimension_unit: str | None = None

    @property
    def is_physical(self) -> bool:
        """Whether the entry is a physical good that has to be shipped."""
        return bool(self.delivery_types) and DeliveryType.PHYSICAL in self.delivery_types


@dataclass(kw_only=True, eq=False)
class Product(CatalogEntry):
    """A catalog product as seen by the cart engine."""

    id: ProductId


@dataclass(kw_only=True, eq=False)
class ProductVariation(CatalogEntry):
    """A concrete SKU of a configurable product.

    Variation values override the product's; unset fields fall back to
    the parent product wherever the pipeline needs them.
    """

    id: VariationId
    product_id: ProductId


# ============================================================================
# Coupon
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Coupon(Entity[CouponId]):
    """Discount rule attached to carts.

    Attributes:
        id: Coupon identifier.
        code: Unique code customers type in.
        discount_type: PERCENTAGE or FIXED_CART.
        discount_value: Percentage points or flat amount.
        minimum_spend: Subtotal below which the coupon yields nothing.
        maximum_spend: Upper bound of the discount the coupon may produce.
        free_shipping: Whether the coupon unlocks free shipping.
        expiry_date: Moment after which the coupon is void.
        max_usage: Number of uses allowed; None means unlimited.
        usage_count: Uses consumed so far.
        allowed_emails: Customer emails the coupon is restricted to.
    """

    id: CouponId
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    description: str | None = None
    minimum_spend: Decimal | None = None
    maximum_spend: Decimal | None = None
    free_shipping: bool = False
    expiry_date: datetime | None = None
    max_usage: int | None = None
    usage_count: int = 0
    allowed_emails: tuple[str, ...] = ()

    def rule_violation(self) -> str | None:
        """Describe what is malformed about this coupon's rule, if anything.

        Returns:
            Reason string, or None when the rule is consistent.
        """
        if self.discount_value < 0:
            return "discount value must not be negative"
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            return "percentage discount must not exceed 100"
        if (
            self.minimum_spend is not None
            and self.maximum_spend is not None
            and self.maximum_spend < self.minimum_spend
        ):
            return "maximum spend is lower than minimum spend"
        return None

    def validate_rule(self) -> None:
        """Raise if the coupon's rule is malformed.

        Raises:
            InvalidCouponRuleError: If the rule is inconsistent.
        """
        reason = self.rule_violation()
        if reason:
            raise InvalidCouponRuleError(self.code, reason)

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_date is not None and self.expiry_date < now

    def is_exhausted(self, attached: bool = False) -> bool:
        """Check the usage limit.

        Args:
            attached: True when this cart's own use is already counted in
                ``usage_count``.

        Returns:
            True if no use is left for this cart.
        """
        if self.max_usage is None:
            return False
        if attached:
            return self.usage_count > self.max_usage
        return self.usage_count >= self.max_usage

    def allows_email(self, email: str | None) -> bool:
        if not self.allowed_emails:
            return True
        if email is None:
            return False
        return email.strip().lower() in {e.lower() for e in self.allowed_emails}

    def ensure_applicable(self, now: datetime, email: str | None = None) -> None:
        """Check that the coupon may be attached to a cart right now.

        Args:
            now: Evaluation time.
            email: Email of the customer applying the coupon.

        Raises:
            InvalidCouponRuleError: If the rule is malformed.
            CouponNotApplicableError: If expired, exhausted or restricted.
        """
        self.validate_rule()
        if self.is_expired(now):
            raise CouponNotApplicableError(self.code, "coupon has expired")
        if self.is_exhausted():
            raise CouponNotApplicableError(self.code, "coupon has reached its maximum usage")
        if not self.allows_email(email):
            raise CouponNotApplicableError(self.code, "coupon is not allowed for this email")


# ============================================================================
# Cart Item Entity
# ============================================================================


class MergeAction(str, Enum):
    """What merge-on-add did to the cart."""

    UPDATED = "updated"
    PROMOTED = "promoted"
    CREATED = "created"


@dataclass(kw_only=True, eq=False)
class CartItem(Entity[CartItemId]):
    """A line in a shopping cart.

    Attributes:
        id: Unique identifier for this cart item.
        product_id: Referenced product.
        variation_id: Referenced variation, None for the base product.
        quantity: Number of units.
        product: Loaded product snapshot (set when read for pricing).
        variation: Loaded variation snapshot.
        added_at: Timestamp when item was added.
    """

    id: CartItemId
    product_id: ProductId
    quantity: int
    variation_id: VariationId | None = None
    product: Product | None = None
    variation: ProductVariation | None = None
    added_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate cart item constraints."""
        if self.quantity <= 0:
            raise InvalidQuantityError(self.quantity)

    @property
    def identity(self) -> ItemIdentity:
        return ItemIdentity(self.product_id, self.variation_id)

    def update_quantity(self, new_quantity: int) -> int:
        """Overwrite item quantity.

        Args:
            new_quantity: New quantity value.

        Returns:
            Previous quantity.

        Raises:
            InvalidQuantityError: If quantity is not positive.
        """
        if new_quantity <= 0:
            raise InvalidQuantityError(new_quantity)
        old_quantity = self.quantity
        self.quantity = new_quantity
        return old_quantity

    def promote(self, variation_id: VariationId, quantity: int) -> None:
        """Turn a base-product line into a line for a concrete variation."""
        self.update_quantity(quantity)
        self.variation_id = variation_id
        self.variation = None


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging a requested line into a cart."""

    item: CartItem
    action: MergeAction


# ============================================================================
# Cart Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Cart(AggregateRoot[CartId]):
    """Shopping cart aggregate root.

    A user owns at most one live cart. The cart guarantees that no two
    of its lines share an identity key ``(product_id, variation_id)``.

    Attributes:
        id: Unique cart identifier.
        user_id: Owner of the cart.
        items: Live cart items.
        coupons: Coupons attached to the cart.
    """

    id: CartId
    user_id: UserId
    items: list[CartItem] = field(default_factory=list)
    coupons: list["Coupon"] = field(default_factory=list)

    @classmethod
    def create(cls, user_id: UserId, cart_id: CartId | None = None) -> "Cart":
        """Create a new, empty cart for a user.

        Args:
            user_id: Owner of the cart.
            cart_id: Optional pre-generated cart ID.

        Returns:
            New Cart instance.
        """
        return cls(id=cart_id or CartId.generate(), user_id=user_id)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def item_count(self) -> int:
        """Get total number of units (sum of quantities)."""
        return sum(item.quantity for item in self.items)

    def get_item(self, item_id: CartItemId) -> CartItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def items_for_product(self, product_id: ProductId) -> list[CartItem]:
        """All lines of the cart that reference a product, any variation."""
        return [item for item in self.items if item.product_id == product_id]

    def find_item(self, identity: ItemIdentity) -> CartItem | None:
        for item in self.items:
            if item.identity == identity:
                return item
        return None

    def has_coupon(self, coupon_id: CouponId) -> bool:
        return any(c.id == coupon_id for c in self.coupons)

    # -------------------------------------------------------------------------
    # Cart Item Operations
    # -------------------------------------------------------------------------

    def merge_item(
        self,
        identity: ItemIdentity,
        quantity: int,
        max_lines: int | None = None,
    ) -> MergeResult:
        """Merge a requested product/variation into the cart.

        Resolution order:
        1. A line with the exact identity gets its quantity overwritten.
        2. If a variation was requested and the product sits in the cart
           without a variation, that line is promoted to the variation.
        3. Otherwise a new line is created.

        Args:
            identity: Requested product and optional variation.
            quantity: New quantity (replaces, never adds).
            max_lines: Maximum number of distinct lines allowed.

        Returns:
            MergeResult with the touched item and the action taken.

        Raises:
            InvalidQuantityError: If quantity is not positive.
            CartLimitExceededError: If a new line would exceed max_lines.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        candidates = self.items_for_product(identity.product_id)

        exact = next((i for i in candidates if i.variation_id == identity.variation_id), None)
        if exact is not None:
            exact.update_quantity(quantity)
            self._touch()
            return MergeResult(item=exact, action=MergeAction.UPDATED)

        if identity.variation_id is not None:
            base_line = next((i for i in candidates if i.variation_id is None), None)
            if base_line is not None:
                base_line.promote(identity.variation_id, quantity)
                self._touch()
                return MergeResult(item=base_line, action=MergeAction.PROMOTED)

        if max_lines is not None and len(self.items) >= max_lines:
            raise CartLimitExceededError(str(self.id), "max_cart_lines", max_lines)

        item = CartItem(
            id=CartItemId.generate(),
            product_id=identity.product_id,
            variation_id=identity.variation_id,
            quantity=quantity,
        )
        self.items.append(item)
        self._touch()
        return MergeResult(item=item, action=MergeAction.CREATED)

    def resolve_item_for_update(
        self,
        product_id: ProductId,
        variation_id: VariationId | None = None,
    ) -> CartItem:
        """Find the single line a quantity update refers to.

        Without a variation id the product must have exactly one line.

        Raises:
            CartItemNotFoundError: If no line matches.
            AmbiguousCartItemError: If several lines match and no variation was given.
        """
        if variation_id is not None:
            item = self.find_item(ItemIdentity(product_id, variation_id))
            if item is None:
                raise CartItemNotFoundError(str(self.id), str(ItemIdentity(product_id, variation_id)))
            return item

        candidates = self.items_for_product(product_id)
        if not candidates:
            raise CartItemNotFoundError(str(self.id), str(product_id))
        if len(candidates) > 1:
            raise AmbiguousCartItemError(
                str(self.id),
                str(product_id),
                [str(i.variation_id) if i.variation_id else None for i in candidates],
            )
        return candidates[0]

    def update_item_quantity(
        self,
        product_id: ProductId,
        quantity: int,
        variation_id: VariationId | None = None,
    ) -> CartItem:
        """Overwrite the quantity of the line for a product.

        Raises:
            InvalidQuantityError: If quantity is not positive.
            CartItemNotFoundError: If no line matches.
            AmbiguousCartItemError: If the product has several lines.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        item = self.resolve_item_for_update(product_id, variation_id)
        item.update_quantity(quantity)
        self._touch()
        return item

    def remove_items(self, item_ids: list[CartItemId]) -> list[CartItem]:
        """Remove lines by cart-item id, all or nothing.

        Args:
            item_ids: Ids of the lines to remove.

        Returns:
            The removed items.

        Raises:
            CartItemNotFoundError: If any id is not a line of this cart.
        """
        removed: list[CartItem] = []
        for item_id in dict.fromkeys(item_ids):
            item = self.get_item(item_id)
            if item is None:
                raise CartItemNotFoundError(str(self.id), str(item_id))
            removed.append(item)

        for item in removed:
            self.items.remove(item)
        if removed:
            self._touch()
        return removed

    def attach_coupon(self, coupon: Coupon, max_coupons: int | None = None) -> bool:
        """Attach a coupon unless it is already attached.

        Returns:
            True if the coupon was newly attached.

        Raises:
            CartLimitExceededError: If the cart would exceed max_coupons.
        """
        if self.has_coupon(coupon.id):
            return False
        if max_coupons is not None and len(self.coupons) >= max_coupons:
            raise CartLimitExceededError(str(self.id), "max_coupons", max_coupons)
        self.coupons.append(coupon)
        self._touch()
        return True


# ============================================================================
# Wishlist
# ============================================================================


@dataclass(kw_only=True, eq=False)
class WishlistItem(Entity[WishlistItemId]):
    """A product selection parked in a wishlist. Presence is all that matters."""

    id: WishlistItemId
    product_id: ProductId
    variation_id: VariationId | None = None
    product: Product | None = None
    variation: ProductVariation | None = None
    added_at: datetime = field(default_factory=_utcnow)

    @property
    def identity(self) -> ItemIdentity:
        return ItemIdentity(self.product_id, self.variation_id)


@dataclass(kw_only=True, eq=False)
class Wishlist(AggregateRoot[WishlistId]):
    """Per-user staging list of product selections, without quantities."""

    id: WishlistId
    user_id: UserId
    items: list[WishlistItem] = field(default_factory=list)

    @classmethod
    def create(cls, user_id: UserId, wishlist_id: WishlistId | None = None) -> "Wishlist":
        return cls(id=wishlist_id or WishlistId.generate(), user_id=user_id)

    def find_item(self, identity: ItemIdentity) -> WishlistItem | None:
        for item in self.items:
            if item.identity == identity:
                return item
        return None

    def add_item(self, identity: ItemIdentity) -> WishlistItem | None:
        """Add a selection unless it is already present.

        Returns:
            The new item, or None when the identity was already listed.
        """
        if self.find_item(identity) is not None:
            return None
        item = WishlistItem(
            id=WishlistItemId.generate(),
            product_id=identity.product_id,
            variation_id=identity.variation_id,
        )
        self.items.append(item)
        self._touch()
        return item

    def discard(self, identity: ItemIdentity) -> WishlistItem | None:
        """Drop the item with this identity, if listed.

        Returns:
            The removed item, or None.
        """
        item = self.find_item(identity)
        if item is None:
            return None
        self.items.remove(item)
        self._touch()
        return item

    def remove_items(self, item_ids: list[WishlistItemId]) -> list[WishlistItem]:
        """Remove items by wishlist-item id, all or nothing.

        Raises:
            WishlistItemNotFoundError: If any id is not listed.
        """
        by_id = {item.id: item for item in self.items}
        removed: list[WishlistItem] = []
        for item_id in dict.fromkeys(item_ids):
            item = by_id.get(item_id)
            if item is None:
                raise WishlistItemNotFoundError(str(self.id), str(item_id))
            removed.append(item)

        for item in removed:
            self.items.remove(item)
        if removed:
            self._touch()
        return removed
