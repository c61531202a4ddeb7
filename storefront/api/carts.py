"""Cart API endpoints.

Provides endpoints for the caller's cart:
- GET /cart - get cart
- POST /cart/items - merge a product selection into the cart
- PATCH /cart/items/{product_id} - overwrite a line's quantity
- POST /cart/items/remove - remove lines by id
- POST /cart/coupons - apply coupons
- POST /cart/totals - calculate totals
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from storefront.api.dependencies import (
    get_calculation_service,
    get_cart_service,
    get_user_email,
    get_user_id,
)
from storefront.api.schemas import (
    AddressSchema,
    AddToCartRequest,
    AppliedCouponSchema,
    ApplyCouponsRequest,
    CalculateTotalsRequest,
    CartItemSchema,
    CartLineTotalSchema,
    CartResponse,
    CartTotalsResponse,
    CouponSchema,
    ErrorResponse,
    ProductSummarySchema,
    RejectedCouponSchema,
    RemoveCartItemsRequest,
    ShippingDetailsSchema,
    ShippingMethodSchema,
    TaxDetailsSchema,
    TaxLineSchema,
    UpdateCartItemRequest,
)
from storefront.application.calculation_service import CalculationService
from storefront.application.cart_service import CartService
from storefront.domain.entities import Cart, CartItem, Product, ProductVariation
from storefront.domain.value_objects import (
    AddressId,
    AddressInfo,
    CartItemId,
    ProductId,
    UserId,
    VariationId,
)
from storefront.pricing.aggregator import CartCalculationResult

router = APIRouter(prefix="/cart", tags=["Cart"])


# ============================================================================
# Converters
# ============================================================================


def product_summary(
    product: Product | None,
    variation: ProductVariation | None = None,
) -> ProductSummarySchema | None:
    """Summarize the product data of a line, variation values first."""
    if product is None:
        return None
    source = variation or product
    return ProductSummarySchema(
        name=source.name or product.name,
        sku=source.sku or product.sku,
        regular_price=source.regular_price,
        sale_price=source.sale_price,
    )


def cart_item_to_schema(item: CartItem) -> CartItemSchema:
    return CartItemSchema(
        id=str(item.id),
        product_id=str(item.product_id),
        variation_id=str(item.variation_id) if item.variation_id else None,
        quantity=item.quantity,
        product=product_summary(item.product, item.variation),
        added_at=item.added_at,
    )


def cart_to_response(cart: Cart) -> CartResponse:
    """Convert Cart entity to response schema."""
    return CartResponse(
        id=str(cart.id),
        user_id=str(cart.user_id),
        items=[cart_item_to_schema(item) for item in cart.items],
        coupons=[
            CouponSchema(
                id=str(c.id),
                code=c.code,
                description=c.description,
                discount_type=c.discount_type,
                discount_value=c.discount_value,
                free_shipping=c.free_shipping,
            )
            for c in cart.coupons
        ],
        item_count=cart.item_count,
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )


def address_to_schema(address: AddressInfo | None) -> AddressSchema | None:
    if address is None:
        return None
    return AddressSchema(
        id=address.id,
        line1=address.line1,
        line2=address.line2,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
    )


def totals_to_response(result: CartCalculationResult) -> CartTotalsResponse:
    """Convert a calculation result to response schema."""
    shipping = result.shipping_details
    tax = result.tax_details

    return CartTotalsResponse(
        cart_id=str(result.cart_id),
        items=[
            CartLineTotalSchema(
                item_id=str(line.item_id),
                product_id=str(line.product_id),
                variation_id=str(line.variation_id) if line.variation_id else None,
                name=line.name,
                sku=line.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
                regular_price=line.regular_price,
                sale_price=line.sale_price,
                line_total=line.line_total,
                line_total_tax=line.line_total_tax,
                line_total_with_tax=line.line_total_with_tax,
                tax_class=line.tax_class,
                tax_status=line.tax_status,
                shipping_class=line.shipping_class,
                needs_shipping=line.needs_shipping,
                weight=line.weight,
                weight_unit=line.weight_unit,
                length=line.length,
                width=line.width,
                height=line.height,
                dimension_unit=line.dimension_unit,
            )
            for line in result.items
        ],
        items_subtotal=result.items_subtotal,
        items_subtotal_tax=result.items_subtotal_tax,
        items_subtotal_with_tax=result.items_subtotal_with_tax,
        subtotal=result.subtotal,
        total_discount=result.total_discount,
        discount_tax=result.discount_tax,
        applied_coupons=[
            AppliedCouponSchema(
                id=str(c.id),
                code=c.code,
                description=c.description,
                discount_type=c.discount_type,
                discount_value=c.discount_value,
                amount=c.amount,
                free_shipping=c.free_shipping,
            )
            for c in result.applied_coupons
        ],
        rejected_coupons=[
            RejectedCouponSchema(id=str(c.id), code=c.code, reason=c.reason)
            for c in result.rejected_coupons
        ],
        subtotal_after_coupons=result.subtotal_after_coupons,
        shipping_total=result.shipping_total,
        shipping_tax=result.shipping_tax,
        shipping_details=ShippingDetailsSchema(
            total=shipping.total,
            tax=shipping.tax,
            methods=[
                ShippingMethodSchema(
                    id=m.id,
                    label=m.label,
                    cost=m.cost,
                    method_id=m.method_id,
                    selected=m.selected,
                )
                for m in shipping.methods
            ],
            free_shipping_threshold=shipping.free_shipping_threshold,
            free_shipping_remaining=shipping.free_shipping_remaining,
        ),
        tax_total=result.tax_total,
        tax_details=TaxDetailsSchema(
            total=tax.total,
            breakdown=[
                TaxLineSchema(
                    id=t.id,
                    label=t.label,
                    rate=t.rate,
                    amount=t.amount,
                    taxable_amount=t.taxable_amount,
                    applies_to_shipping=t.applies_to_shipping,
                    is_compound=t.is_compound,
                )
                for t in tax.breakdown
            ],
            address=address_to_schema(tax.address),
        ),
        total=result.total,
        billing_address=address_to_schema(result.billing_address),
        shipping_address=address_to_schema(result.shipping_address),
        prices_include_tax=result.prices_include_tax,
        tax_based_on=result.tax_based_on,
        currency=result.currency,
        needs_shipping=result.needs_shipping,
        can_ship_to_address=result.can_ship_to_address,
        calculated_at=result.calculated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CartResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get cart",
    description="Get the caller's live cart with its lines and coupons.",
)
async def get_cart(
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    cart = await service.get_cart(user_id)
    return cart_to_response(cart)


@router.post(
    "/items",
    response_model=CartResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Add to cart",
    description=(
        "Merge a product selection into the cart. An existing line for the same "
        "product and variation gets its quantity replaced; a line for the bare "
        "product is promoted when a variation is added."
    ),
)
async def add_to_cart(
    request: AddToCartRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    """Add a product to the cart.

    Args:
        request: Selection to add.
        user_id: Caller.
        service: Cart service.

    Returns:
        Updated cart.
    """
    cart = await service.add_to_cart(
        user_id=user_id,
        product_id=ProductId(request.product_id),
        quantity=request.quantity,
        variation_id=VariationId(request.variation_id) if request.variation_id else None,
    )
    return cart_to_response(cart)


@router.patch(
    "/items/{product_id}",
    response_model=CartResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Update cart item",
    description="Overwrite the quantity of the cart line for a product.",
)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    cart = await service.update_cart_item(
        user_id=user_id,
        product_id=ProductId(product_id),
        quantity=request.quantity,
        variation_id=VariationId(request.variation_id) if request.variation_id else None,
    )
    return cart_to_response(cart)


@router.post(
    "/items/remove",
    response_model=CartResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Remove cart items",
    description="Remove cart lines by id. Fails without removing anything if an id is unknown.",
)
async def remove_cart_items(
    request: RemoveCartItemsRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    cart = await service.remove_items_from_cart(
        user_id=user_id,
        cart_item_ids=[CartItemId(i) for i in request.cart_item_ids],
    )
    return cart_to_response(cart)


@router.post(
    "/coupons",
    response_model=CartResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Apply coupons",
    description="Attach coupons to the cart. Each newly attached coupon consumes one use.",
)
async def apply_coupons(
    request: ApplyCouponsRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    email: Annotated[str | None, Depends(get_user_email)],
    service: Annotated[CartService, Depends(get_cart_service)],
) -> CartResponse:
    cart = await service.apply_coupons(user_id=user_id, codes=request.codes, email=email)
    return cart_to_response(cart)


@router.post(
    "/totals",
    response_model=CartTotalsResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Calculate cart totals",
    description=(
        "Compute subtotal, coupon discount, shipping, tax and grand total of the "
        "cart. Read-only; the result is never stored."
    ),
)
async def calculate_totals(
    request: CalculateTotalsRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[CalculationService, Depends(get_calculation_service)],
) -> CartTotalsResponse:
    """Calculate cart totals.

    Args:
        request: Addresses to price the cart for.
        user_id: Caller.
        service: Calculation service.

    Returns:
        Cart totals.
    """
    result = await service.calculate_cart_totals(
        user_id=user_id,
        billing_address_id=AddressId(request.billing_address_id) if request.billing_address_id else None,
        shipping_address_id=(
            AddressId(request.shipping_address_id) if request.shipping_address_id else None
        ),
    )
    return totals_to_response(result)
