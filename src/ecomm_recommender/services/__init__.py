"""Business logic services."""

from ecomm_recommender.services.candidates import CandidateAggregator, RecommendationItem
from ecomm_recommender.services.catalog import Product, ProductCatalog, SqlProductCatalog
from ecomm_recommender.services.interaction_store import (
    InteractionSnapshot,
    InteractionStore,
    SqlInteractionStore,
)
from ecomm_recommender.services.interaction_tracking import InteractionService
from ecomm_recommender.services.popularity import PopularityRanker
from ecomm_recommender.services.recommendation_engine import (
    RecommendationEngine,
    RecommendationResult,
)
from ecomm_recommender.services.similarity import SimilarityEngine, UserSimilarity

__all__ = [
    "CandidateAggregator",
    "InteractionService",
    "InteractionSnapshot",
    "InteractionStore",
    "PopularityRanker",
    "Product",
    "ProductCatalog",
    "RecommendationEngine",
    "RecommendationItem",
    "RecommendationResult",
    "SimilarityEngine",
    "SqlInteractionStore",
    "SqlProductCatalog",
    "UserSimilarity",
]
