"""Domain exceptions.

All domain-level errors that represent business rule violations.
They fall into four families that the API layer maps onto HTTP
responses: not found, validation, calculation and concurrency errors.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for references that do not resolve to a live record."""

    error_code = "NOT_FOUND"


class CartNotFoundError(NotFoundError):
    """Raised when a user has no live cart."""

    error_code = "CART_NOT_FOUND"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"Cart not found for user {user_id}",
            details={"user_id": user_id},
        )


class CartItemNotFoundError(NotFoundError):
    """Raised when a cart item is not found."""

    error_code = "CART_ITEM_NOT_FOUND"

    def __init__(self, cart_id: str, item_ref: str) -> None:
        """Initialize cart item not found error.

        Args:
            cart_id: ID of the cart.
            item_ref: Item id or product id that did not match.
        """
        super().__init__(
            f"Item {item_ref} not found in cart {cart_id}",
            details={"cart_id": cart_id, "item": item_ref},
        )


class WishlistNotFoundError(NotFoundError):
    """Raised when a user has no live wishlist."""

    error_code = "WISHLIST_NOT_FOUND"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"Wishlist not found for user {user_id}",
            details={"user_id": user_id},
        )


class WishlistItemNotFoundError(NotFoundError):
    """Raised when a wishlist item is not found."""

    error_code = "WISHLIST_ITEM_NOT_FOUND"

    def __init__(self, wishlist_id: str, item_id: str) -> None:
        super().__init__(
            f"Item {item_id} not found in wishlist {wishlist_id}",
            details={"wishlist_id": wishlist_id, "item_id": item_id},
        )


class ProductNotFoundError(NotFoundError):
    """Raised when a product does not exist or is not visible."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )


class ProductVariationNotFoundError(NotFoundError):
    """Raised when a variation does not exist for the given product."""

    error_code = "PRODUCT_VARIATION_NOT_FOUND"

    def __init__(self, product_id: str, variation_id: str) -> None:
        super().__init__(
            f"Variation {variation_id} not found for product {product_id}",
            details={"product_id": product_id, "variation_id": variation_id},
        )


class CouponNotFoundError(NotFoundError):
    """Raised when one or more coupon codes do not resolve."""

    error_code = "COUPON_NOT_FOUND"

    def __init__(self, codes: list[str]) -> None:
        super().__init__(
            f"Coupon codes not found: {', '.join(codes)}",
            details={"codes": codes},
        )


class AddressNotFoundError(NotFoundError):
    """Raised when an address id does not belong to the user."""

    error_code = "ADDRESS_NOT_FOUND"

    def __init__(self, address_id: str, user_id: str) -> None:
        super().__init__(
            f"Address {address_id} not found for user {user_id}",
            details={"address_id": address_id, "user_id": user_id},
        )


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Base class for inputs rejected before any state is mutated."""

    error_code = "VALIDATION_FAILED"


class InvalidQuantityError(ValidationError):
    """Raised when an invalid quantity is provided."""

    error_code = "INVALID_QUANTITY"

    def __init__(self, quantity: int, reason: str = "Quantity must be positive") -> None:
        """Initialize invalid quantity error.

        Args:
            quantity: The invalid quantity value.
            reason: Explanation of why the quantity is invalid.
        """
        super().__init__(
            f"Invalid quantity {quantity}: {reason}",
            details={"quantity": quantity, "reason": reason},
        )


class AmbiguousCartItemError(ValidationError):
    """Raised when a product id matches several lines and no variation was given."""

    error_code = "AMBIGUOUS_CART_ITEM"

    def __init__(self, cart_id: str, product_id: str, variation_ids: list[str | None]) -> None:
        super().__init__(
            f"Product {product_id} has {len(variation_ids)} lines in cart {cart_id}; "
            "a variation id is required",
            details={
                "cart_id": cart_id,
                "product_id": product_id,
                "variation_ids": variation_ids,
            },
        )


class CartLimitExceededError(ValidationError):
    """Raised when a cart would exceed its configured number of lines or coupons."""

    error_code = "CART_LIMIT_EXCEEDED"

    def __init__(self, cart_id: str, limit_name: str, limit: int) -> None:
        super().__init__(
            f"Cart {cart_id} exceeds {limit_name} limit of {limit}",
            details={"cart_id": cart_id, "limit_name": limit_name, "limit": limit},
        )


class DuplicateCouponCodeError(ValidationError):
    """Raised when the same coupon code is submitted twice in one request."""

    error_code = "DUPLICATE_COUPON_CODE"

    def __init__(self, codes: list[str]) -> None:
        super().__init__(
            "Duplicate coupon codes are not allowed",
            details={"codes": codes},
        )


class InvalidCouponRuleError(ValidationError):
    """Raised when a coupon's configuration is internally inconsistent."""

    error_code = "INVALID_COUPON_RULE"

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(
            f"Coupon {code} is malformed: {reason}",
            details={"code": code, "reason": reason},
        )


class CouponNotApplicableError(ValidationError):
    """Raised when a coupon exists but cannot be used (expired, exhausted, restricted)."""

    error_code = "COUPON_NOT_APPLICABLE"

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(
            f"Coupon {code} cannot be applied: {reason}",
            details={"code": code, "reason": reason},
        )


# ============================================================================
# Calculation Errors
# ============================================================================


class CartCalculationError(DomainError):
    """Raised when any pricing stage fails.

    The original stage error is chained as ``__cause__``.
    """

    error_code = "CALCULATION_FAILED"

    def __init__(self, cart_id: str, stage: str, reason: str) -> None:
        super().__init__(
            f"Failed to calculate totals for cart {cart_id} at stage '{stage}': {reason}",
            details={"cart_id": cart_id, "stage": stage, "reason": reason},
        )
        self.stage = stage


class MissingPriceError(DomainError):
    """Raised when a product or variation carries no regular price."""

    error_code = "MISSING_PRICE"

    def __init__(self, product_id: str, variation_id: str | None = None) -> None:
        super().__init__(
            f"No regular price for product {product_id}"
            + (f" variation {variation_id}" if variation_id else ""),
            details={"product_id": product_id, "variation_id": variation_id},
        )


# ============================================================================
# Concurrency Errors
# ============================================================================


class ConcurrencyConflictError(DomainError):
    """Raised when a concurrent writer won a uniqueness race.

    Services retry the surrounding operation; callers only see this
    error when every retry lost the race.
    """

    error_code = "CONCURRENCY_CONFLICT"

    def __init__(self, resource: str, reason: str) -> None:
        super().__init__(
            f"Concurrent modification of {resource}: {reason}",
            details={"resource": resource, "reason": reason},
        )
