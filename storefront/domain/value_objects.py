"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self
from uuid import uuid4

from storefront.domain.base import ValueObject

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_cents(amount: Decimal) -> Decimal:
    """Round a monetary amount half-up to the cent.

    Args:
        amount: Amount in major currency units.

    Returns:
        Amount quantized to two decimal places.
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class EntityId(ValueObject):
    """Strongly-typed identifier.

    Subclasses are distinct types, so a ``ProductId`` never compares equal
    to a ``VariationId`` holding the same string. They are the only values
    used to reference another aggregate.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate identifier format."""
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError(f"{type(self).__name__} cannot be empty")

    @classmethod
    def generate(cls) -> Self:
        """Generate a new random identifier.

        Returns:
            New identifier wrapping a UUID4 string.
        """
        return cls(value=str(uuid4()))

    def __str__(self) -> str:
        """Return string representation.

        Returns:
            Identifier value.
        """
        return self.value


@dataclass(frozen=True)
class UserId(EntityId):
    """Identifier of the user owning a cart or wishlist."""


@dataclass(frozen=True)
class CartId(EntityId):
    """Strongly-typed cart identifier."""


@dataclass(frozen=True)
class CartItemId(EntityId):
    """Strongly-typed cart item identifier."""


@dataclass(frozen=True)
class WishlistId(EntityId):
    """Strongly-typed wishlist identifier."""


@dataclass(frozen=True)
class WishlistItemId(EntityId):
    """Strongly-typed wishlist item identifier."""


@dataclass(frozen=True)
class ProductId(EntityId):
    """Strongly-typed product identifier."""


@dataclass(frozen=True)
class VariationId(EntityId):
    """Strongly-typed product variation identifier."""


@dataclass(frozen=True)
class CouponId(EntityId):
    """Strongly-typed coupon identifier."""


@dataclass(frozen=True)
class AddressId(EntityId):
    """Strongly-typed address identifier."""


# ============================================================================
# Enumerations
# ============================================================================


class DiscountType(str, Enum):
    """How a coupon's discount value is interpreted."""

    PERCENTAGE = "PERCENTAGE"
    FIXED_CART = "FIXED_CART"


class DeliveryType(str, Enum):
    """Delivery flags a product or variation may carry."""

    PHYSICAL = "Physical Product"
    DOWNLOADABLE = "Downloadable Product"
    VIRTUAL = "Virtual Product"


class TaxBasis(str, Enum):
    """Which address governs the tax calculation."""

    BILLING_ADDRESS = "BILLING_ADDRESS"
    SHIPPING_ADDRESS = "SHIPPING_ADDRESS"
    STORE_ADDRESS = "STORE_ADDRESS"


# ============================================================================
# Item Identity
# ============================================================================


@dataclass(frozen=True)
class ItemIdentity(ValueObject):
    """Merge key of a cart or wishlist line.

    Attributes:
        product_id: Product of the line.
        variation_id: Selected variation, or None for the base product.
    """

    product_id: ProductId
    variation_id: VariationId | None = None

    def __str__(self) -> str:
        if self.variation_id is None:
            return str(self.product_id)
        return f"{self.product_id}:{self.variation_id}"


# ============================================================================
# Address Value Object
# ============================================================================


@dataclass(frozen=True)
class AddressInfo(ValueObject):
    """Resolved billing, shipping or store address used as calculation input.

    Attributes:
        line1: Primary address line.
        city: City name.
        state: State/province/region.
        postal_code: Postal/ZIP code.
        country: ISO 3166-1 alpha-2 country code.
        line2: Secondary address line (optional).
        id: Address record id when the address is user-owned.
    """

    line1: str
    city: str
    state: str | None
    postal_code: str
    country: str = "US"
    line2: str | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate address fields."""
        if not self.city or not self.city.strip():
            raise ValueError("City cannot be empty")
        if not self.country or len(self.country.strip()) != 2:
            raise ValueError("Country must be an ISO 3166-1 alpha-2 code")
        # Normalize country and state to uppercase
        object.__setattr__(self, "country", self.country.strip().upper())
        if self.state:
            object.__setattr__(self, "state", self.state.strip().upper())

    @property
    def region_key(self) -> str | None:
        """Country-state key used for regional tax rates (e.g. ``US-NY``)."""
        if not self.state:
            return None
        return f"{self.country}-{self.state}"

    def format_single_line(self) -> str:
        """Format address as single line.

        Returns:
            Formatted address string.
        """
        parts = [self.line1]
        if self.line2:
            parts.append(self.line2)
        parts.extend(p for p in [self.city, self.state, self.postal_code, self.country] if p)
        return ", ".join(parts)
