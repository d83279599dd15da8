"""Candidate scoring from a neighborhood of similar users."""

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Iterable

import structlog

from ecomm_recommender.constants import (
    COLLABORATIVE_REASON,
    DEFAULT_RECOMMENDATION_LIMIT,
    DEFAULT_WEIGHTS,
    ScoringWeights,
)
from ecomm_recommender.exceptions import ProductNotFoundError
from ecomm_recommender.services.catalog import Product, ProductCatalog
from ecomm_recommender.services.interaction_store import InteractionSnapshot
from ecomm_recommender.services.similarity import UserSimilarity

logger = structlog.get_logger()


@dataclass(frozen=True)
class RecommendationItem:
    """A recommended product with its score and a human-readable reason."""

    product_id: int
    product_name: str
    category_id: int
    price: float
    score: float
    reason: str

    @classmethod
    def from_product(cls, product: Product, score: float, reason: str) -> "RecommendationItem":
        return cls(
            product_id=product.id,
            product_name=product.name,
            category_id=product.category_id or 0,
            price=product.price,
            score=score,
            reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def rank_items(items: Iterable[RecommendationItem], limit: int) -> list[RecommendationItem]:
    """Sort by descending score, ties by ascending product id, and truncate."""
    return sorted(items, key=lambda item: (-item.score, item.product_id))[:limit]


class CandidateAggregator:
    """Scores products endorsed by similar users.

    A neighbor's purchase adds ``similarity * 3.0`` to the product's score and
    a neighbor's like adds ``similarity * 1.5``. Views never score candidates;
    they only influence who counts as a neighbor.
    """

    def __init__(self, catalog: ProductCatalog, weights: ScoringWeights = DEFAULT_WEIGHTS):
        self.catalog = catalog
        self.weights = weights

    async def aggregate(
        self,
        user_id: int,
        neighbors: list[UserSimilarity],
        snapshot: InteractionSnapshot,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> list[RecommendationItem]:
        """
        Score candidate products for a user from their neighbors' activity.

        Args:
            user_id: The target user's ID
            neighbors: Similar users, in descending similarity order
            snapshot: All interaction events for this request
            limit: Maximum number of candidates to return

        Returns:
            Scored candidates, best first
        """
        target = snapshot.interactions_for(user_id)

        purchases_by_user: dict[int, list[int]] = defaultdict(list)
        for purchase in snapshot.purchases:
            purchases_by_user[purchase.user_id].append(purchase.product_id)

        likes_by_user: dict[int, list[int]] = defaultdict(list)
        for like in snapshot.likes:
            likes_by_user[like.user_id].append(like.product_id)

        scores: dict[int, float] = defaultdict(float)
        products: dict[int, Product | None] = {}

        # Purchases: strongest endorsement
        for neighbor in neighbors:
            for product_id in purchases_by_user.get(neighbor.user_id, ()):
                if product_id in target.purchased:
                    continue
                if await self._lookup(product_id, products) is None:
                    continue
                scores[product_id] += neighbor.similarity_score * self.weights.purchase_multiplier

        # Likes: skip anything the user already liked or owns
        for neighbor in neighbors:
            for product_id in likes_by_user.get(neighbor.user_id, ()):
                if product_id in target.liked or product_id in target.purchased:
                    continue
                if await self._lookup(product_id, products) is None:
                    continue
                scores[product_id] += neighbor.similarity_score * self.weights.like_multiplier

        candidates = [
            RecommendationItem.from_product(products[product_id], score, COLLABORATIVE_REASON)
            for product_id, score in scores.items()
        ]

        logger.debug(
            "Aggregated collaborative candidates",
            user_id=user_id,
            neighbors=len(neighbors),
            candidates=len(candidates),
            missing_products=sum(1 for p in products.values() if p is None),
        )
        return rank_items(candidates, limit)

    async def _lookup(self, product_id: int, cache: dict[int, Product | None]) -> Product | None:
        """Fetch product metadata once per computation; None if it was deleted."""
        if product_id not in cache:
            try:
                cache[product_id] = await self.catalog.get_product_by_id(product_id)
            except ProductNotFoundError:
                logger.debug("Skipping candidate missing from catalog", product_id=product_id)
                cache[product_id] = None
        return cache[product_id]
