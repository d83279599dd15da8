"""Algorithm constants for the collaborative-filtering engine.

These are fixed parameters of the scoring model, not runtime configuration.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


class InteractionType(str, Enum):
    """Types of user interactions the engine learns from."""

    VIEW = "view"
    LIKE = "like"
    PURCHASE = "purchase"


# Contribution of each per-type Jaccard index to the combined similarity.
# Sums to 1.0, so two users with identical interaction sets score exactly 1.0.
INTERACTION_WEIGHTS: Final[Mapping[InteractionType, float]] = MappingProxyType(
    {
        InteractionType.PURCHASE: 0.50,
        InteractionType.LIKE: 0.35,
        InteractionType.VIEW: 0.15,
    }
)

# Candidate score boost applied to a neighbor's similarity
PURCHASE_SCORE_MULTIPLIER: Final[float] = 3.0
LIKE_SCORE_MULTIPLIER: Final[float] = 1.5

# Neighbors below this combined similarity are discarded
MIN_SIMILARITY_THRESHOLD: Final[float] = 0.1

# Limits
DEFAULT_RECOMMENDATION_LIMIT: Final[int] = 10
MAX_RECOMMENDATION_LIMIT: Final[int] = 50
NEIGHBOR_LIMIT: Final[int] = 10
DEFAULT_HISTORY_LIMIT: Final[int] = 50
MAX_HISTORY_LIMIT: Final[int] = 100

# Response tags
ALGORITHM_COLLABORATIVE: Final[str] = "collaborative_filtering"
ALGORITHM_POPULARITY: Final[str] = "popularity_based"

COLLABORATIVE_REASON: Final[str] = "Users with similar interests liked this"
POPULARITY_REASON_TEMPLATE: Final[str] = "Popular choice - {count} users liked this"


@dataclass(frozen=True)
class ScoringWeights:
    """Immutable bundle of the scoring parameters used by one engine."""

    purchase_weight: float = INTERACTION_WEIGHTS[InteractionType.PURCHASE]
    like_weight: float = INTERACTION_WEIGHTS[InteractionType.LIKE]
    view_weight: float = INTERACTION_WEIGHTS[InteractionType.VIEW]
    purchase_multiplier: float = PURCHASE_SCORE_MULTIPLIER
    like_multiplier: float = LIKE_SCORE_MULTIPLIER
    min_similarity: float = MIN_SIMILARITY_THRESHOLD


DEFAULT_WEIGHTS: Final[ScoringWeights] = ScoringWeights()


def clamp_limit(
    limit: int | None,
    default: int = DEFAULT_RECOMMENDATION_LIMIT,
    maximum: int = MAX_RECOMMENDATION_LIMIT,
) -> int:
    """Coerce a caller-supplied limit into (0, maximum], falling back to default."""
    if limit is None or limit <= 0 or limit > maximum:
        return default
    return limit
