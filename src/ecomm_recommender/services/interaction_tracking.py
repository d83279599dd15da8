"""Interaction recording service.

Validates and records views, likes and purchases, and builds per-user
interaction summaries.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from ecomm_recommender.constants import (
    DEFAULT_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
    InteractionType,
    clamp_limit,
)
from ecomm_recommender.exceptions import (
    InsufficientStockError,
    InvalidInteractionError,
    LikeNotFoundError,
)
from ecomm_recommender.services.catalog import ProductCatalog
from ecomm_recommender.services.interaction_store import InteractionWriter, ProductInteraction

logger = structlog.get_logger()


@dataclass
class UserInteractionSummary:
    """Recent interactions of a user, with overall totals."""

    user_id: int
    viewed_products: list[ProductInteraction] = field(default_factory=list)
    liked_products: list[ProductInteraction] = field(default_factory=list)
    purchased_products: list[ProductInteraction] = field(default_factory=list)
    total_views: int = 0
    total_likes: int = 0
    total_purchases: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class InteractionService:
    """Service for recording user interactions with products."""

    def __init__(self, store: InteractionWriter, catalog: ProductCatalog):
        self.store = store
        self.catalog = catalog

    async def record_view(self, user_id: int, product_id: int) -> None:
        """Record a product view. Raises ProductNotFoundError for unknown products."""
        await self.catalog.get_product_by_id(product_id)
        await self.store.record_view(user_id, product_id)
        logger.debug("Recorded view", user_id=user_id, product_id=product_id)

    async def like_product(self, user_id: int, product_id: int) -> bool:
        """
        Record a like.

        Liking an already-liked product is a no-op.

        Returns:
            True if a new like was stored
        """
        await self.catalog.get_product_by_id(product_id)
        created = await self.store.record_like(user_id, product_id)
        logger.debug("Recorded like", user_id=user_id, product_id=product_id, created=created)
        return created

    async def unlike_product(self, user_id: int, product_id: int) -> None:
        """Remove a like. Raises LikeNotFoundError if the user never liked it."""
        if not await self.store.remove_like(user_id, product_id):
            raise LikeNotFoundError(user_id, product_id)
        logger.debug("Removed like", user_id=user_id, product_id=product_id)

    async def purchase_product(self, user_id: int, product_id: int, quantity: int) -> float:
        """
        Record a purchase at the product's current price and reduce its stock.

        Args:
            user_id: The buyer's ID
            product_id: The purchased product's ID
            quantity: Number of units, must be positive

        Returns:
            The unit price recorded for the purchase
        """
        if quantity <= 0:
            raise InvalidInteractionError(
                "quantity must be greater than 0", details={"quantity": quantity}
            )

        product = await self.catalog.get_product_by_id(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product_id, quantity, product.stock)

        # Stock may have moved since the read above
        if not await self.catalog.decrement_stock(product_id, quantity):
            refreshed = await self.catalog.get_product_by_id(product_id)
            raise InsufficientStockError(product_id, quantity, refreshed.stock)

        await self.store.record_purchase(user_id, product_id, quantity, product.price)
        logger.info(
            "Recorded purchase",
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            price=product.price,
        )
        return product.price

    async def get_history(
        self,
        user_id: int,
        interaction_type: InteractionType,
        limit: int | None = DEFAULT_HISTORY_LIMIT,
    ) -> list[ProductInteraction]:
        """
        Get a user's most recent interactions of one type, newest first.

        Args:
            user_id: The user's ID
            interaction_type: Views, likes or purchases
            limit: Maximum number of entries; values outside (0, 100]
                fall back to 50

        Returns:
            Interactions joined with product name, category and price
            (the purchase price for purchases)
        """
        limit = clamp_limit(limit, default=DEFAULT_HISTORY_LIMIT, maximum=MAX_HISTORY_LIMIT)
        return await self.store.get_user_history(user_id, interaction_type, limit)

    async def is_product_liked(self, user_id: int, product_id: int) -> bool:
        return await self.store.has_liked(user_id, product_id)

    async def has_purchased_product(self, user_id: int, product_id: int) -> bool:
        return await self.store.has_purchased(user_id, product_id)

    async def get_interaction_summary(
        self, user_id: int, limit: int | None = DEFAULT_HISTORY_LIMIT
    ) -> UserInteractionSummary:
        """Get a user's most recent views, likes and purchases plus totals."""
        views = await self.get_history(user_id, InteractionType.VIEW, limit)
        likes = await self.get_history(user_id, InteractionType.LIKE, limit)
        purchases = await self.get_history(user_id, InteractionType.PURCHASE, limit)
        totals = await self.store.count_user_interactions(user_id)

        return UserInteractionSummary(
            user_id=user_id,
            viewed_products=views,
            liked_products=likes,
            purchased_products=purchases,
            total_views=totals.get(InteractionType.VIEW, 0),
            total_likes=totals.get(InteractionType.LIKE, 0),
            total_purchases=totals.get(InteractionType.PURCHASE, 0),
        )
