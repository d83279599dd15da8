"""Pytest configuration and fixtures."""

from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from ecomm_recommender.api.dependencies import get_interaction_store, get_product_catalog
from ecomm_recommender.config import Settings, get_settings
from ecomm_recommender.constants import InteractionType
from ecomm_recommender.exceptions import ProductNotFoundError
from ecomm_recommender.main import create_app
from ecomm_recommender.services.catalog import Product
from ecomm_recommender.services.interaction_store import (
    InteractionSnapshot,
    LikeEvent,
    ProductInteraction,
    PurchaseEvent,
    ViewEvent,
)
from ecomm_recommender.services.recommendation_engine import RecommendationEngine

FIXED_NOW = datetime(2026, 10, 17, 12, 30, 45, 123456, tzinfo=timezone.utc)


# =============================================================================
# In-memory collaborators
# =============================================================================


class FakeCatalog:
    """Dict-backed product catalog that counts lookups."""

    def __init__(self, products: list[Product]):
        self.products = {p.id: p for p in products}
        self.lookups: Counter[int] = Counter()
        self.fail: Exception | None = None

    async def get_product_by_id(self, product_id: int) -> Product:
        if self.fail:
            raise self.fail
        self.lookups[product_id] += 1
        if product_id not in self.products:
            raise ProductNotFoundError(product_id)
        return self.products[product_id]

    async def decrement_stock(self, product_id: int, quantity: int) -> bool:
        product = self.products[product_id]
        if product.stock < quantity:
            return False
        self.products[product_id] = replace(product, stock=product.stock - quantity)
        return True


class FakeInteractionStore:
    """List-backed interaction store."""

    def __init__(self, catalog: FakeCatalog):
        self.catalog = catalog
        self.views: list[ViewEvent] = []
        self.likes: list[LikeEvent] = []
        self.purchases: list[PurchaseEvent] = []
        self.reads = 0
        self.fail: Exception | None = None
        self._tick = 0

    def _next_time(self) -> datetime:
        self._tick += 1
        return FIXED_NOW + timedelta(seconds=self._tick)

    # Seeding helpers
    def add_view(self, user_id: int, product_id: int) -> None:
        self.views.append(ViewEvent(user_id, product_id, self._next_time()))

    def add_like(self, user_id: int, product_id: int) -> None:
        self.likes.append(LikeEvent(user_id, product_id, self._next_time()))

    def add_purchase(self, user_id: int, product_id: int, quantity: int = 1) -> None:
        price = self.catalog.products[product_id].price if product_id in self.catalog.products else 1.0
        self.purchases.append(
            PurchaseEvent(user_id, product_id, quantity, price, self._next_time())
        )

    def snapshot(self) -> InteractionSnapshot:
        return InteractionSnapshot(
            views=tuple(self.views), likes=tuple(self.likes), purchases=tuple(self.purchases)
        )

    # InteractionStore
    async def get_all_views(self) -> list[ViewEvent]:
        if self.fail:
            raise self.fail
        self.reads += 1
        return list(self.views)

    async def get_all_likes(self) -> list[LikeEvent]:
        if self.fail:
            raise self.fail
        self.reads += 1
        return list(self.likes)

    async def get_all_purchases(self) -> list[PurchaseEvent]:
        if self.fail:
            raise self.fail
        self.reads += 1
        return list(self.purchases)

    # InteractionWriter
    async def record_view(self, user_id: int, product_id: int) -> None:
        self.add_view(user_id, product_id)

    async def record_like(self, user_id: int, product_id: int) -> bool:
        if any(like.user_id == user_id and like.product_id == product_id for like in self.likes):
            return False
        self.add_like(user_id, product_id)
        return True

    async def remove_like(self, user_id: int, product_id: int) -> bool:
        before = len(self.likes)
        self.likes = [
            like for like in self.likes if not (like.user_id == user_id and like.product_id == product_id)
        ]
        return len(self.likes) < before

    async def record_purchase(
        self, user_id: int, product_id: int, quantity: int, price: float
    ) -> None:
        self.purchases.append(
            PurchaseEvent(user_id, product_id, quantity, price, self._next_time())
        )

    async def get_user_history(
        self, user_id: int, interaction_type: InteractionType, limit: int
    ) -> list[ProductInteraction]:
        if interaction_type is InteractionType.VIEW:
            rows = [(v.product_id, None, v.viewed_at) for v in self.views if v.user_id == user_id]
        elif interaction_type is InteractionType.LIKE:
            rows = [(like.product_id, None, like.liked_at) for like in self.likes if like.user_id == user_id]
        else:
            rows = [
                (p.product_id, p.price_at_purchase, p.purchased_at)
                for p in self.purchases
                if p.user_id == user_id
            ]
        rows.sort(key=lambda row: row[2], reverse=True)

        history = []
        for product_id, price, at in rows[:limit]:
            product = self.catalog.products[product_id]
            history.append(
                ProductInteraction(
                    product_id=product_id,
                    product_name=product.name,
                    category_id=product.category_id or 0,
                    price=price if price is not None else product.price,
                    interacted_at=at,
                )
            )
        return history

    async def count_user_interactions(self, user_id: int) -> dict[InteractionType, int]:
        return {
            InteractionType.VIEW: sum(1 for v in self.views if v.user_id == user_id),
            InteractionType.LIKE: sum(1 for like in self.likes if like.user_id == user_id),
            InteractionType.PURCHASE: sum(1 for p in self.purchases if p.user_id == user_id),
        }

    async def has_liked(self, user_id: int, product_id: int) -> bool:
        return any(like.user_id == user_id and like.product_id == product_id for like in self.likes)

    async def has_purchased(self, user_id: int, product_id: int) -> bool:
        return any(p.user_id == user_id and p.product_id == product_id for p in self.purchases)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def products() -> list[Product]:
    """Fifteen catalog products; product 3 has no category and 6 is out of stock."""
    items = [
        Product(id=1, name="Wireless Headphones", category_id=1, price=299.99, stock=50),
        Product(id=2, name="Mechanical Keyboard", category_id=1, price=149.99, stock=100),
        Product(id=3, name="Laptop Stand", category_id=None, price=39.99, stock=5),
        Product(id=4, name="Office Chair", category_id=2, price=399.99, stock=25),
        Product(id=5, name="Desk Lamp", category_id=2, price=59.99, stock=75),
        Product(id=6, name="USB-C Hub", category_id=1, price=49.99, stock=0),
    ]
    items.extend(
        Product(id=i, name=f"Accessory {i}", category_id=3, price=10.0 + i, stock=10)
        for i in range(7, 16)
    )
    return items


@pytest.fixture
def catalog(products: list[Product]) -> FakeCatalog:
    return FakeCatalog(products)


@pytest.fixture
def store(catalog: FakeCatalog) -> FakeInteractionStore:
    return FakeInteractionStore(catalog)


@pytest.fixture
def engine(store: FakeInteractionStore, catalog: FakeCatalog) -> RecommendationEngine:
    return RecommendationEngine(store, catalog, clock=lambda: FIXED_NOW)


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        postgres_host="localhost",
        postgres_port=5432,
        postgres_user="test",
        postgres_password="test",
        postgres_db="test_db",
    )


@pytest.fixture
def app(test_settings: Settings, store: FakeInteractionStore, catalog: FakeCatalog) -> Any:
    """Create test application backed by the in-memory collaborators."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_interaction_store] = lambda: store
    app.dependency_overrides[get_product_catalog] = lambda: catalog
    return app


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)
