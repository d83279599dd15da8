"""Recommendation engine service.

Provides personalized product recommendations using user-based collaborative
filtering, falling back to globally popular products when a user has no
usable signal.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from ecomm_recommender.constants import (
    ALGORITHM_COLLABORATIVE,
    ALGORITHM_POPULARITY,
    DEFAULT_RECOMMENDATION_LIMIT,
    DEFAULT_WEIGHTS,
    NEIGHBOR_LIMIT,
    ScoringWeights,
    clamp_limit,
)
from ecomm_recommender.services.candidates import CandidateAggregator, RecommendationItem
from ecomm_recommender.services.catalog import ProductCatalog
from ecomm_recommender.services.interaction_store import (
    InteractionSnapshot,
    InteractionStore,
    load_snapshot,
)
from ecomm_recommender.services.popularity import PopularityRanker
from ecomm_recommender.services.similarity import SimilarityEngine, UserSimilarity

logger = structlog.get_logger()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(moment: datetime) -> str:
    """Format a timestamp as RFC 3339 with second precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.replace(microsecond=0).isoformat()
    return text.replace("+00:00", "Z")


@dataclass
class RecommendationResult:
    """Ranked recommendations for one user."""

    user_id: int
    algorithm: str
    generated_at: str
    recommendations: list[RecommendationItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "recommendations": [item.to_dict() for item in self.recommendations],
            "algorithm": self.algorithm,
            "generated_at": self.generated_at,
        }


class RecommendationEngine:
    """Engine for generating product recommendations.

    Stateless between calls: every request reads the full interaction
    history once and computes similarities from scratch.
    """

    def __init__(
        self,
        interaction_store: InteractionStore,
        catalog: ProductCatalog,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.interaction_store = interaction_store
        self.similarity_engine = SimilarityEngine(weights)
        self.aggregator = CandidateAggregator(catalog, weights)
        self.popularity = PopularityRanker(catalog)
        self.clock = clock

    async def get_recommendations(
        self,
        user_id: int,
        limit: int | None = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> RecommendationResult:
        """
        Get personalized recommendations for a user.

        Args:
            user_id: The user's ID
            limit: Maximum number of recommendations; values outside
                (0, 50] are replaced by the default of 10

        Returns:
            Recommendations tagged with the algorithm that produced them
        """
        limit = clamp_limit(limit)
        snapshot = await load_snapshot(self.interaction_store)

        if snapshot.interactions_for(user_id).is_empty():
            return await self._popular(user_id, snapshot, limit, reason="no_interactions")

        neighbors = self.similarity_engine.find_similar_users(
            user_id, snapshot, limit=NEIGHBOR_LIMIT
        )
        if not neighbors:
            return await self._popular(user_id, snapshot, limit, reason="no_similar_users")

        candidates = await self.aggregator.aggregate(user_id, neighbors, snapshot, limit=limit)
        if not candidates:
            return await self._popular(user_id, snapshot, limit, reason="no_candidates")

        logger.info(
            "Generated collaborative recommendations",
            user_id=user_id,
            neighbors=len(neighbors),
            count=len(candidates),
        )
        return RecommendationResult(
            user_id=user_id,
            recommendations=candidates,
            algorithm=ALGORITHM_COLLABORATIVE,
            generated_at=format_rfc3339(self.clock()),
        )

    async def get_similar_users(
        self,
        user_id: int,
        limit: int | None = NEIGHBOR_LIMIT,
    ) -> list[UserSimilarity]:
        """
        Get users with interaction patterns similar to the given user.

        Args:
            user_id: The user's ID
            limit: Maximum number of users; clamped like recommendation limits

        Returns:
            Similar users ordered by descending similarity
        """
        limit = clamp_limit(limit, default=NEIGHBOR_LIMIT)
        snapshot = await load_snapshot(self.interaction_store)
        return self.similarity_engine.find_similar_users(user_id, snapshot, limit=limit)

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    async def _popular(
        self,
        user_id: int,
        snapshot: InteractionSnapshot,
        limit: int,
        reason: str,
    ) -> RecommendationResult:
        """Fall back to the most-liked products."""
        items = await self.popularity.rank(snapshot.likes, limit=limit)
        logger.info(
            "Falling back to popular products",
            user_id=user_id,
            reason=reason,
            count=len(items),
        )
        return RecommendationResult(
            user_id=user_id,
            recommendations=items,
            algorithm=ALGORITHM_POPULARITY,
            generated_at=format_rfc3339(self.clock()),
        )
