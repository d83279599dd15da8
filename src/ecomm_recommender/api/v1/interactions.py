"""User interaction tracking API endpoints."""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ecomm_recommender.api.dependencies import get_interaction_service, parse_limit
from ecomm_recommender.constants import InteractionType
from ecomm_recommender.services.interaction_tracking import InteractionService

router = APIRouter()


# =============================================================================
# Models
# =============================================================================


class InteractionRequest(BaseModel):
    """Request model for a view or like."""

    user_id: int = Field(..., description="User identifier")
    product_id: int = Field(..., description="Product identifier")


class PurchaseRequest(InteractionRequest):
    """Request model for a purchase."""

    quantity: int = Field(1, description="Number of units purchased")


class InteractionResponse(BaseModel):
    """Response after recording an interaction."""

    success: bool
    recorded_at: str


class LikeResponse(InteractionResponse):
    """Response after recording a like."""

    created: bool = Field(..., description="False if the product was already liked")


class PurchaseResponse(InteractionResponse):
    """Response after recording a purchase."""

    quantity: int
    price_at_purchase: float


class ProductInteractionItem(BaseModel):
    product_id: int
    product_name: str
    category_id: int
    price: float
    interacted_at: datetime | None = None


class InteractionSummaryResponse(BaseModel):
    """Recent interactions of a user with totals."""

    user_id: int
    viewed_products: list[ProductInteractionItem]
    liked_products: list[ProductInteractionItem]
    purchased_products: list[ProductInteractionItem]
    total_views: int
    total_likes: int
    total_purchases: int


class InteractionHistoryResponse(BaseModel):
    """Recent interactions of one type."""

    user_id: int
    interaction_type: InteractionType
    products: list[ProductInteractionItem]
    count: int


class ProductInteractionStatus(BaseModel):
    """Whether a user has liked or bought a given product."""

    user_id: int
    product_id: int
    liked: bool
    purchased: bool


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/views", response_model=InteractionResponse)
async def record_view(
    interaction: InteractionRequest,
    service: InteractionService = Depends(get_interaction_service),
) -> InteractionResponse:
    """
    Record that a user viewed a product page.

    Views only influence which users count as similar; they never push
    products into recommendations directly.
    """
    await service.record_view(interaction.user_id, interaction.product_id)
    return InteractionResponse(success=True, recorded_at=_now())


@router.post("/likes", response_model=LikeResponse)
async def like_product(
    interaction: InteractionRequest,
    service: InteractionService = Depends(get_interaction_service),
) -> LikeResponse:
    """Record that a user liked a product. Liking twice is a no-op."""
    created = await service.like_product(interaction.user_id, interaction.product_id)
    return LikeResponse(success=True, created=created, recorded_at=_now())


@router.delete("/likes/{user_id}/{product_id}", response_model=InteractionResponse)
async def unlike_product(
    user_id: int,
    product_id: int,
    service: InteractionService = Depends(get_interaction_service),
) -> InteractionResponse:
    """Remove a user's like from a product."""
    await service.unlike_product(user_id, product_id)
    return InteractionResponse(success=True, recorded_at=_now())


@router.post("/purchases", response_model=PurchaseResponse)
async def purchase_product(
    purchase: PurchaseRequest,
    service: InteractionService = Depends(get_interaction_service),
) -> PurchaseResponse:
    """
    Record a purchase.

    The current catalog price is stored as the purchase price and the
    product's stock is reduced by the purchased quantity.
    """
    price = await service.purchase_product(
        purchase.user_id, purchase.product_id, purchase.quantity
    )
    return PurchaseResponse(
        success=True,
        quantity=purchase.quantity,
        price_at_purchase=price,
        recorded_at=_now(),
    )


@router.get("/users/{user_id}/summary", response_model=InteractionSummaryResponse)
async def get_interaction_summary(
    user_id: int,
    limit: Annotated[
        str | None, Query(description="Items per list (1-100, anything else falls back to 50)")
    ] = None,
    service: InteractionService = Depends(get_interaction_service),
) -> InteractionSummaryResponse:
    """Get a user's recent views, likes and purchases."""
    summary = await service.get_interaction_summary(user_id, limit=parse_limit(limit))
    return InteractionSummaryResponse(**summary.to_dict())


@router.get(
    "/users/{user_id}/history/{interaction_type}",
    response_model=InteractionHistoryResponse,
)
async def get_interaction_history(
    user_id: int,
    interaction_type: InteractionType,
    limit: Annotated[
        str | None, Query(description="Number of entries (1-100, anything else falls back to 50)")
    ] = None,
    service: InteractionService = Depends(get_interaction_service),
) -> InteractionHistoryResponse:
    """
    Get a user's recent views, likes or purchases, newest first.

    Purchases report the price paid, not the current catalog price.
    """
    history = await service.get_history(user_id, interaction_type, limit=parse_limit(limit))
    return InteractionHistoryResponse(
        user_id=user_id,
        interaction_type=interaction_type,
        products=[ProductInteractionItem(**asdict(item)) for item in history],
        count=len(history),
    )


@router.get(
    "/users/{user_id}/products/{product_id}",
    response_model=ProductInteractionStatus,
)
async def get_product_interaction_status(
    user_id: int,
    product_id: int,
    service: InteractionService = Depends(get_interaction_service),
) -> ProductInteractionStatus:
    """Check whether the user currently likes and has ever bought the product."""
    return ProductInteractionStatus(
        user_id=user_id,
        product_id=product_id,
        liked=await service.is_product_liked(user_id, product_id),
        purchased=await service.has_purchased_product(user_id, product_id),
    )
