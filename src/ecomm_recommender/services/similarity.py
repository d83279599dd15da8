"""User-user similarity for collaborative filtering.

Similarity between two users is a weighted sum of per-type Jaccard indices
over the products they viewed, liked and purchased:

    score = purchase_jaccard * 0.50 + like_jaccard * 0.35 + view_jaccard * 0.15
"""

from dataclasses import dataclass

import structlog

from ecomm_recommender.constants import DEFAULT_WEIGHTS, NEIGHBOR_LIMIT, ScoringWeights
from ecomm_recommender.services.interaction_store import (
    InteractionSnapshot,
    UserInteractionSet,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class UserSimilarity:
    """Another user ranked by how closely they match the target user."""

    user_id: int
    similarity_score: float
    common_likes: int
    common_views: int


@dataclass(frozen=True)
class PairOverlap:
    """Per-type intersection counts and the combined score for a user pair."""

    common_purchases: int
    common_likes: int
    common_views: int
    score: float

    @property
    def has_shared_signal(self) -> bool:
        return bool(self.common_purchases or self.common_likes or self.common_views)


def jaccard_index(a: set[int], b: set[int]) -> tuple[float, int]:
    """Return (|a & b| / |a | b|, |a & b|). An empty union scores 0."""
    common = len(a & b)
    union = len(a) + len(b) - common
    if union == 0:
        return 0.0, common
    return common / union, common


class SimilarityEngine:
    """Ranks users by weighted-Jaccard similarity to a target user."""

    def __init__(self, weights: ScoringWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def compare(self, target: UserInteractionSet, other: UserInteractionSet) -> PairOverlap:
        """Score a single pair of users."""
        purchase_sim, common_purchases = jaccard_index(target.purchased, other.purchased)
        like_sim, common_likes = jaccard_index(target.liked, other.liked)
        view_sim, common_views = jaccard_index(target.viewed, other.viewed)

        score = (
            purchase_sim * self.weights.purchase_weight
            + like_sim * self.weights.like_weight
            + view_sim * self.weights.view_weight
        )
        return PairOverlap(
            common_purchases=common_purchases,
            common_likes=common_likes,
            common_views=common_views,
            score=score,
        )

    def find_similar_users(
        self,
        user_id: int,
        snapshot: InteractionSnapshot,
        limit: int = NEIGHBOR_LIMIT,
    ) -> list[UserSimilarity]:
        """
        Rank every other user against the target.

        Users without a single shared product are skipped, and users scoring
        below the minimum similarity are dropped. Ties are broken by ascending
        user id so the ranking is deterministic.

        Args:
            user_id: The target user's ID
            snapshot: All interaction events for this request
            limit: Maximum number of similar users to return

        Returns:
            Similar users ordered by descending similarity
        """
        interactions = snapshot.group_by_user()
        target = interactions.pop(user_id, None)
        if target is None or target.is_empty():
            return []

        similarities: list[UserSimilarity] = []
        for other_id, other in interactions.items():
            overlap = self.compare(target, other)

            if not overlap.has_shared_signal:
                continue
            if overlap.score < self.weights.min_similarity:
                continue

            similarities.append(
                UserSimilarity(
                    user_id=other_id,
                    similarity_score=overlap.score,
                    common_likes=overlap.common_likes,
                    common_views=overlap.common_views,
                )
            )

        similarities.sort(key=lambda s: (-s.similarity_score, s.user_id))

        logger.debug(
            "Computed user similarities",
            user_id=user_id,
            candidates=len(interactions),
            above_threshold=len(similarities),
        )
        return similarities[:limit]
