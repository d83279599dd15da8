"""Popularity ranking used for cold-start users."""

from collections import Counter
from typing import Iterable

import structlog

from ecomm_recommender.constants import DEFAULT_RECOMMENDATION_LIMIT, POPULARITY_REASON_TEMPLATE
from ecomm_recommender.exceptions import ProductNotFoundError
from ecomm_recommender.services.candidates import RecommendationItem
from ecomm_recommender.services.catalog import Product, ProductCatalog
from ecomm_recommender.services.interaction_store import LikeEvent

logger = structlog.get_logger()


class PopularityRanker:
    """Ranks products by how many users liked them."""

    def __init__(self, catalog: ProductCatalog):
        self.catalog = catalog

    async def rank(
        self,
        likes: Iterable[LikeEvent],
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> list[RecommendationItem]:
        """
        Get the most-liked products.

        Scores are normalized against the most-liked product in the result,
        so the first item always scores 1.0. Products deleted from the catalog
        are left out.

        Args:
            likes: Every like event in the system
            limit: Maximum number of products to return

        Returns:
            Popular products, most liked first (empty if nobody liked anything)
        """
        like_counts = Counter(like.product_id for like in likes)
        ranked = sorted(like_counts.items(), key=lambda item: (-item[1], item[0]))[:limit]

        resolved: list[tuple[Product, int]] = []
        for product_id, count in ranked:
            try:
                product = await self.catalog.get_product_by_id(product_id)
            except ProductNotFoundError:
                logger.debug("Skipping popular product missing from catalog", product_id=product_id)
                continue
            resolved.append((product, count))

        if not resolved:
            return []

        max_count = resolved[0][1]
        return [
            RecommendationItem.from_product(
                product,
                score=count / max_count,
                reason=POPULARITY_REASON_TEMPLATE.format(count=count),
            )
            for product, count in resolved
        ]
