"""API schemas for the Storefront API.

Pydantic models for request/response validation and serialization.
Monetary amounts are decimals in major currency units and serialize
as strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from storefront.domain.value_objects import DiscountType, TaxBasis


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class AddressSchema(BaseModel):
    """Postal address."""

    id: str | None = Field(default=None, description="Address identifier")
    line1: str = Field(..., description="Street address line 1")
    line2: str | None = Field(default=None, description="Street address line 2")
    city: str = Field(..., description="City")
    state: str | None = Field(default=None, description="State/province")
    postal_code: str = Field(..., description="Postal/ZIP code")
    country: str = Field(..., description="ISO 3166-1 alpha-2 country code")


# ============================================================================
# Cart Schemas
# ============================================================================


class AddToCartRequest(BaseModel):
    """Request to merge a product selection into the cart."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    variation_id: str | None = Field(default=None, description="Variation identifier")
    quantity: int = Field(..., description="Desired quantity (replaces the current one)")


class UpdateCartItemRequest(BaseModel):
    """Request to overwrite the quantity of a product's cart line."""

    quantity: int = Field(..., description="New quantity")
    variation_id: str | None = Field(
        default=None,
        description="Variation identifier; required when the product has several lines",
    )


class RemoveCartItemsRequest(BaseModel):
    """Request to remove cart lines by id."""

    cart_item_ids: list[str] = Field(..., min_length=1, description="Cart item identifiers")


class ApplyCouponsRequest(BaseModel):
    """Request to attach coupons to the cart."""

    codes: list[str] = Field(..., min_length=1, description="Coupon codes")


class ProductSummarySchema(BaseModel):
    """Product data shown on a cart or wishlist line."""

    name: str = Field(..., description="Product or variation name")
    sku: str | None = Field(default=None, description="Stock keeping unit")
    regular_price: Decimal | None = Field(default=None, description="Regular price")
    sale_price: Decimal | None = Field(default=None, description="Sale price")


class CartItemSchema(BaseModel):
    """Cart line."""

    id: str = Field(..., description="Cart item identifier")
    product_id: str = Field(..., description="Product identifier")
    variation_id: str | None = Field(default=None, description="Variation identifier")
    quantity: int = Field(..., ge=1, description="Quantity")
    product: ProductSummarySchema | None = Field(default=None, description="Product data")
    added_at: datetime = Field(..., description="When the line was added")


class CouponSchema(BaseModel):
    """Coupon attached to a cart."""

    id: str = Field(..., description="Coupon identifier")
    code: str = Field(..., description="Coupon code")
    description: str | None = Field(default=None, description="Coupon description")
    discount_type: DiscountType = Field(..., description="Discount mode")
    discount_value: Decimal = Field(..., description="Percentage points or flat amount")
    free_shipping: bool = Field(default=False, description="Whether it grants free shipping")


class CartResponse(BaseModel):
    """Cart representation."""

    id: str = Field(..., description="Cart identifier")
    user_id: str = Field(..., description="Owner of the cart")
    items: list[CartItemSchema] = Field(default_factory=list, description="Cart lines")
    coupons: list[CouponSchema] = Field(default_factory=list, description="Attached coupons")
    item_count: int = Field(..., description="Total number of units")
    created_at: datetime = Field(..., description="When the cart was created")
    updated_at: datetime = Field(..., description="When the cart was last updated")


# ============================================================================
# Wishlist Schemas
# ============================================================================


class AddToWishlistRequest(BaseModel):
    """Request to add a product selection to the wishlist."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    variation_id: str | None = Field(default=None, description="Variation identifier")


class RemoveWishlistItemsRequest(BaseModel):
    """Request to remove wishlist entries by id."""

    wishlist_item_ids: list[str] = Field(..., min_length=1, description="Wishlist item identifiers")


class WishlistItemSchema(BaseModel):
    """Wishlist entry."""

    id: str = Field(..., description="Wishlist item identifier")
    product_id: str = Field(..., description="Product identifier")
    variation_id: str | None = Field(default=None, description="Variation identifier")
    product: ProductSummarySchema | None = Field(default=None, description="Product data")
    added_at: datetime = Field(..., description="When the entry was added")


class WishlistResponse(BaseModel):
    """Wishlist representation."""

    id: str = Field(..., description="Wishlist identifier")
    user_id: str = Field(..., description="Owner of the wishlist")
    items: list[WishlistItemSchema] = Field(default_factory=list, description="Entries")


# ============================================================================
# Totals Schemas
# ============================================================================


class CalculateTotalsRequest(BaseModel):
    """Request to compute cart totals."""

    billing_address_id: str | None = Field(default=None, description="Billing address of the user")
    shipping_address_id: str | None = Field(default=None, description="Shipping address of the user")


class CartLineTotalSchema(BaseModel):
    """Priced cart line."""

    item_id: str
    product_id: str
    variation_id: str | None = None
    name: str
    sku: str | None = None
    quantity: int
    unit_price: Decimal
    regular_price: Decimal
    sale_price: Decimal | None = None
    line_total: Decimal
    line_total_tax: Decimal
    line_total_with_tax: Decimal
    tax_class: str | None = None
    tax_status: str | None = None
    shipping_class: str | None = None
    needs_shipping: bool
    weight: Decimal | None = None
    weight_unit: str | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    dimension_unit: str | None = None


class AppliedCouponSchema(BaseModel):
    """Coupon that contributed to the discount."""

    id: str
    code: str
    description: str | None = None
    discount_type: DiscountType
    discount_value: Decimal
    amount: Decimal
    free_shipping: bool


class RejectedCouponSchema(BaseModel):
    """Attached coupon skipped during the calculation."""

    id: str
    code: str
    reason: str


class ShippingMethodSchema(BaseModel):
    """Shipping option."""

    id: str
    label: str
    cost: Decimal
    method_id: str
    selected: bool


class ShippingDetailsSchema(BaseModel):
    """Shipping resolution."""

    total: Decimal
    tax: Decimal
    methods: list[ShippingMethodSchema]
    free_shipping_threshold: Decimal
    free_shipping_remaining: Decimal


class TaxLineSchema(BaseModel):
    """Tax breakdown line."""

    id: str
    label: str
    rate: Decimal
    amount: Decimal
    taxable_amount: Decimal
    applies_to_shipping: bool
    is_compound: bool


class TaxDetailsSchema(BaseModel):
    """Tax resolution."""

    total: Decimal
    breakdown: list[TaxLineSchema]
    address: AddressSchema | None = None


class CartTotalsResponse(BaseModel):
    """Cart totals at one point in time."""

    cart_id: str = Field(..., description="Cart identifier")
    items: list[CartLineTotalSchema] = Field(..., description="Priced lines")
    items_subtotal: Decimal = Field(..., description="Sum of line totals before tax")
    items_subtotal_tax: Decimal = Field(..., description="Informational sum of line taxes")
    items_subtotal_with_tax: Decimal = Field(..., description="Sum of line totals with line tax")
    subtotal: Decimal = Field(..., description="Amount coupons apply to")
    total_discount: Decimal = Field(..., description="Coupon discount, at most the subtotal")
    discount_tax: Decimal = Field(..., description="Tax share of the discount")
    applied_coupons: list[AppliedCouponSchema] = Field(default_factory=list)
    rejected_coupons: list[RejectedCouponSchema] = Field(default_factory=list)
    subtotal_after_coupons: Decimal = Field(..., description="Subtotal minus discount")
    shipping_total: Decimal = Field(..., description="Cost of the selected shipping method")
    shipping_tax: Decimal = Field(..., description="Shipping tax")
    shipping_details: ShippingDetailsSchema
    tax_total: Decimal = Field(..., description="Cart-level tax")
    tax_details: TaxDetailsSchema
    total: Decimal = Field(..., description="Grand total")
    billing_address: AddressSchema | None = None
    shipping_address: AddressSchema | None = None
    prices_include_tax: bool
    tax_based_on: TaxBasis
    currency: str
    needs_shipping: bool
    can_ship_to_address: bool
    calculated_at: datetime
