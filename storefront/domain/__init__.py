"""Domain layer - Entities, value objects, exceptions.

This module exports the core domain building blocks following DDD patterns:

- **Entities**: Objects with identity (Cart, Wishlist, Product, Coupon)
- **Value Objects**: Immutable objects compared by value (AddressInfo, typed IDs)
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from storefront.domain import Cart, ItemIdentity, ProductId, UserId, VariationId

    # Create a cart
    cart = Cart.create(user_id=UserId("user-1"))

    # Add a product, then pick a concrete variation for it
    cart.merge_item(ItemIdentity(ProductId("p-1")), quantity=1)
    cart.merge_item(ItemIdentity(ProductId("p-1"), VariationId("v-red")), quantity=3)

    # Still one line, now for the red variation
    print(len(cart.items), cart.item_count)  # 1 3
"""

# Base classes
from storefront.domain.base import AggregateRoot, Entity, ValueObject

# Entities
from storefront.domain.entities import (
    Cart,
    CartItem,
    CatalogEntry,
    Coupon,
    MergeAction,
    MergeResult,
    Product,
    ProductVariation,
    Wishlist,
    WishlistItem,
)

# Exceptions
from storefront.domain.exceptions import (
    AddressNotFoundError,
    AmbiguousCartItemError,
    CartCalculationError,
    CartItemNotFoundError,
    CartLimitExceededError,
    CartNotFoundError,
    ConcurrencyConflictError,
    CouponNotApplicableError,
    CouponNotFoundError,
    DomainError,
    DuplicateCouponCodeError,
    InvalidCouponRuleError,
    InvalidQuantityError,
    MissingPriceError,
    NotFoundError,
    ProductNotFoundError,
    ProductVariationNotFoundError,
    ValidationError,
    WishlistItemNotFoundError,
    WishlistNotFoundError,
)

# Value Objects
from storefront.domain.value_objects import (
    AddressId,
    AddressInfo,
    CartId,
    CartItemId,
    CouponId,
    DeliveryType,
    DiscountType,
    EntityId,
    ItemIdentity,
    ProductId,
    TaxBasis,
    UserId,
    VariationId,
    WishlistId,
    WishlistItemId,
    round_cents,
)

__all__ = [
    # Base
    "AggregateRoot",
    "Entity",
    "ValueObject",
    # Entities
    "Cart",
    "CartItem",
    "CatalogEntry",
    "Coupon",
    "MergeAction",
    "MergeResult",
    "Product",
    "ProductVariation",
    "Wishlist",
    "WishlistItem",
    # Exceptions
    "AddressNotFoundError",
    "AmbiguousCartItemError",
    "CartCalculationError",
    "CartItemNotFoundError",
    "CartLimitExceededError",
    "CartNotFoundError",
    "ConcurrencyConflictError",
    "CouponNotApplicableError",
    "CouponNotFoundError",
    "DomainError",
    "DuplicateCouponCodeError",
    "InvalidCouponRuleError",
    "InvalidQuantityError",
    "MissingPriceError",
    "NotFoundError",
    "ProductNotFoundError",
    "ProductVariationNotFoundError",
    "ValidationError",
    "WishlistItemNotFoundError",
    "WishlistNotFoundError",
    # Value Objects
    "AddressId",
    "AddressInfo",
    "CartId",
    "CartItemId",
    "CouponId",
    "DeliveryType",
    "DiscountType",
    "EntityId",
    "ItemIdentity",
    "ProductId",
    "TaxBasis",
    "UserId",
    "VariationId",
    "WishlistId",
    "WishlistItemId",
    "round_cents",
]
