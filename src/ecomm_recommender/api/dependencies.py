"""FastAPI dependencies wiring services to the request's database session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ecomm_recommender.infrastructure.database.connection import get_session
from ecomm_recommender.services.catalog import ProductCatalog, SqlProductCatalog
from ecomm_recommender.services.interaction_store import InteractionWriter, SqlInteractionStore
from ecomm_recommender.services.interaction_tracking import InteractionService
from ecomm_recommender.services.recommendation_engine import RecommendationEngine


def get_interaction_store(session: AsyncSession = Depends(get_session)) -> InteractionWriter:
    return SqlInteractionStore(session)


def get_product_catalog(session: AsyncSession = Depends(get_session)) -> ProductCatalog:
    return SqlProductCatalog(session)


def get_recommendation_engine(
    store: InteractionWriter = Depends(get_interaction_store),
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> RecommendationEngine:
    return RecommendationEngine(store, catalog)


def get_interaction_service(
    store: InteractionWriter = Depends(get_interaction_store),
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> InteractionService:
    return InteractionService(store, catalog)


def parse_limit(raw: str | None) -> int | None:
    """Read a ``limit`` query value leniently.

    Anything that is not a plain integer becomes None, which the services
    replace with their default. Out-of-range integers are clamped there too.
    """
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None
