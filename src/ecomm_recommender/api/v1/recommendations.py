"""Recommendation API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ecomm_recommender.api.dependencies import get_recommendation_engine, parse_limit
from ecomm_recommender.services.recommendation_engine import RecommendationEngine

router = APIRouter()


class RecommendedProduct(BaseModel):
    """A recommended product with relevance score."""

    product_id: int
    product_name: str
    category_id: int = Field(..., description="Category ID, 0 if the product has none")
    price: float
    score: float = Field(..., description="Relevance score")
    reason: str = Field(..., description="Why the product was recommended")


class RecommendationResponse(BaseModel):
    """Response containing recommendations."""

    user_id: int
    recommendations: list[RecommendedProduct]
    algorithm: str = Field(..., description="collaborative_filtering or popularity_based")
    generated_at: str = Field(..., description="RFC 3339 timestamp")


class SimilarUser(BaseModel):
    """Another user with a similar interaction pattern."""

    user_id: int
    similarity_score: float
    common_likes: int
    common_views: int


class SimilarUsersResponse(BaseModel):
    """Response containing similar users."""

    user_id: int
    similar_users: list[SimilarUser]
    count: int


@router.get("/users/{user_id}", response_model=RecommendationResponse)
async def get_recommendations(
    user_id: int,
    limit: Annotated[
        str | None,
        Query(description="Number of recommendations (1-50, anything else falls back to 10)"),
    ] = None,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> RecommendationResponse:
    """
    Get personalized product recommendations for a user.

    **Algorithm:**
    1. Find users whose views, likes and purchases overlap with this user's
       (weighted Jaccard similarity)
    2. Score products the top-10 similar users purchased (x3.0) or liked (x1.5)
    3. Exclude products the user already purchased or liked
    4. Fall back to the most-liked products when there is no signal

    The `algorithm` field tells cold-start responses (`popularity_based`)
    apart from personalized ones (`collaborative_filtering`).
    """
    result = await engine.get_recommendations(user_id=user_id, limit=parse_limit(limit))
    return RecommendationResponse(**result.to_dict())


@router.get("/users/{user_id}/similar", response_model=SimilarUsersResponse)
async def get_similar_users(
    user_id: int,
    limit: Annotated[
        str | None,
        Query(description="Number of similar users (1-50, anything else falls back to 10)"),
    ] = None,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> SimilarUsersResponse:
    """
    Get users with similar interaction patterns.

    Only users sharing at least one viewed, liked or purchased product and
    scoring at least 0.1 are returned.
    """
    similar_users = await engine.get_similar_users(user_id=user_id, limit=parse_limit(limit))

    return SimilarUsersResponse(
        user_id=user_id,
        similar_users=[
            SimilarUser(
                user_id=s.user_id,
                similarity_score=s.similarity_score,
                common_likes=s.common_likes,
                common_views=s.common_views,
            )
            for s in similar_users
        ],
        count=len(similar_users),
    )
