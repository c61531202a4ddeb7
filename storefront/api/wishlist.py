"""Wishlist API endpoints.

Provides endpoints for the caller's wishlist:
- GET /wishlist - get wishlist
- POST /wishlist/items - add a product selection
- POST /wishlist/items/remove - remove entries by id
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from storefront.api.carts import product_summary
from storefront.api.dependencies import get_user_id, get_wishlist_service
from storefront.api.schemas import (
    AddToWishlistRequest,
    ErrorResponse,
    RemoveWishlistItemsRequest,
    WishlistItemSchema,
    WishlistResponse,
)
from storefront.application.wishlist_service import WishlistService
from storefront.domain.entities import Wishlist
from storefront.domain.value_objects import ProductId, UserId, VariationId, WishlistItemId

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


def wishlist_to_response(wishlist: Wishlist) -> WishlistResponse:
    """Convert Wishlist entity to response schema."""
    return WishlistResponse(
        id=str(wishlist.id),
        user_id=str(wishlist.user_id),
        items=[
            WishlistItemSchema(
                id=str(item.id),
                product_id=str(item.product_id),
                variation_id=str(item.variation_id) if item.variation_id else None,
                product=product_summary(item.product, item.variation),
                added_at=item.added_at,
            )
            for item in wishlist.items
        ],
    )


@router.get(
    "",
    response_model=WishlistResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get wishlist",
)
async def get_wishlist(
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[WishlistService, Depends(get_wishlist_service)],
) -> WishlistResponse:
    wishlist = await service.get_wishlist(user_id)
    return wishlist_to_response(wishlist)


@router.post(
    "/items",
    response_model=WishlistResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Add to wishlist",
    description="Add a product selection. Adding an already listed selection changes nothing.",
)
async def add_to_wishlist(
    request: AddToWishlistRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[WishlistService, Depends(get_wishlist_service)],
) -> WishlistResponse:
    wishlist = await service.add_to_wishlist(
        user_id=user_id,
        product_id=ProductId(request.product_id),
        variation_id=VariationId(request.variation_id) if request.variation_id else None,
    )
    return wishlist_to_response(wishlist)


@router.post(
    "/items/remove",
    response_model=WishlistResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Remove wishlist items",
)
async def remove_wishlist_items(
    request: RemoveWishlistItemsRequest,
    user_id: Annotated[UserId, Depends(get_user_id)],
    service: Annotated[WishlistService, Depends(get_wishlist_service)],
) -> WishlistResponse:
    wishlist = await service.remove_items_from_wishlist(
        user_id=user_id,
        wishlist_item_ids=[WishlistItemId(i) for i in request.wishlist_item_ids],
    )
    return wishlist_to_response(wishlist)
