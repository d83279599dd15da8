"""Interaction event store.

Holds the view/like/purchase event types, the per-request snapshot the
recommendation engine works on, and the PostgreSQL-backed store that
reads and records those events.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecomm_recommender.constants import InteractionType
from ecomm_recommender.exceptions import InteractionStoreError

logger = structlog.get_logger()


# =============================================================================
# Event Types
# =============================================================================


@dataclass(frozen=True)
class ViewEvent:
    user_id: int
    product_id: int
    viewed_at: datetime | None = None


@dataclass(frozen=True)
class LikeEvent:
    user_id: int
    product_id: int
    liked_at: datetime | None = None


@dataclass(frozen=True)
class PurchaseEvent:
    user_id: int
    product_id: int
    quantity: int = 1
    price_at_purchase: float = 0.0
    purchased_at: datetime | None = None


@dataclass(frozen=True)
class ProductInteraction:
    """A single interaction joined with the product it refers to."""

    product_id: int
    product_name: str
    category_id: int
    price: float
    interacted_at: datetime | None


@dataclass
class UserInteractionSet:
    """Product ids a user has viewed, liked and purchased."""

    viewed: set[int] = field(default_factory=set)
    liked: set[int] = field(default_factory=set)
    purchased: set[int] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not (self.viewed or self.liked or self.purchased)


@dataclass(frozen=True)
class InteractionSnapshot:
    """All interaction events, read once for a single recommendation request."""

    views: tuple[ViewEvent, ...] = ()
    likes: tuple[LikeEvent, ...] = ()
    purchases: tuple[PurchaseEvent, ...] = ()

    def group_by_user(self) -> dict[int, UserInteractionSet]:
        """Build every user's interaction sets in one pass over the events."""
        grouped: dict[int, UserInteractionSet] = defaultdict(UserInteractionSet)
        for view in self.views:
            grouped[view.user_id].viewed.add(view.product_id)
        for like in self.likes:
            grouped[like.user_id].liked.add(like.product_id)
        for purchase in self.purchases:
            grouped[purchase.user_id].purchased.add(purchase.product_id)
        return dict(grouped)

    def interactions_for(self, user_id: int) -> UserInteractionSet:
        """Interaction sets for a single user (empty if the user has none)."""
        interactions = UserInteractionSet()
        interactions.viewed.update(
            view.product_id for view in self.views if view.user_id == user_id
        )
        interactions.liked.update(
            like.product_id for like in self.likes if like.user_id == user_id
        )
        interactions.purchased.update(
            purchase.product_id for purchase in self.purchases if purchase.user_id == user_id
        )
        return interactions


# =============================================================================
# Store Interface
# =============================================================================


class InteractionStore(Protocol):
    """Bulk read access to interaction events."""

    async def get_all_views(self) -> list[ViewEvent]: ...

    async def get_all_likes(self) -> list[LikeEvent]: ...

    async def get_all_purchases(self) -> list[PurchaseEvent]: ...


class InteractionWriter(InteractionStore, Protocol):
    """Store operations used when recording and summarising interactions."""

    async def record_view(self, user_id: int, product_id: int) -> None: ...

    async def record_like(self, user_id: int, product_id: int) -> bool: ...

    async def remove_like(self, user_id: int, product_id: int) -> bool: ...

    async def record_purchase(
        self, user_id: int, product_id: int, quantity: int, price: float
    ) -> None: ...

    async def get_user_history(
        self, user_id: int, interaction_type: InteractionType, limit: int
    ) -> list[ProductInteraction]: ...

    async def count_user_interactions(self, user_id: int) -> dict[InteractionType, int]: ...

    async def has_liked(self, user_id: int, product_id: int) -> bool: ...

    async def has_purchased(self, user_id: int, product_id: int) -> bool: ...


async def load_snapshot(store: InteractionStore) -> InteractionSnapshot:
    """Read every view, like and purchase from the store.

    Reads run one after another since they usually share a database session.
    Any store failure propagates to the caller.
    """
    views = await store.get_all_views()
    likes = await store.get_all_likes()
    purchases = await store.get_all_purchases()

    logger.debug(
        "Loaded interaction snapshot",
        views=len(views),
        likes=len(likes),
        purchases=len(purchases),
    )
    return InteractionSnapshot(
        views=tuple(views), likes=tuple(likes), purchases=tuple(purchases)
    )


# =============================================================================
# PostgreSQL Implementation
# =============================================================================


_HISTORY_QUERIES = {
    InteractionType.VIEW: """
        SELECT
            v.product_id,
            p.name,
            p.category_id,
            p.price,
            v.viewed_at AS interacted_at
        FROM user_product_views v
        JOIN products p ON p.id = v.product_id
        WHERE v.user_id = :user_id
        ORDER BY v.viewed_at DESC
        LIMIT :limit
    """,
    InteractionType.LIKE: """
        SELECT
            l.product_id,
            p.name,
            p.category_id,
            p.price,
            l.liked_at AS interacted_at
        FROM user_product_likes l
        JOIN products p ON p.id = l.product_id
        WHERE l.user_id = :user_id
        ORDER BY l.liked_at DESC
        LIMIT :limit
    """,
    InteractionType.PURCHASE: """
        SELECT
            pu.product_id,
            p.name,
            p.category_id,
            pu.price_at_purchase AS price,
            pu.purchased_at AS interacted_at
        FROM user_product_purchases pu
        JOIN products p ON p.id = pu.product_id
        WHERE pu.user_id = :user_id
        ORDER BY pu.purchased_at DESC
        LIMIT :limit
    """,
}


class SqlInteractionStore:
    """Interaction store backed by the user_product_* tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, operation: str, query: str, params: dict[str, Any] | None = None):
        try:
            return await self.session.execute(text(query), params or {})
        except SQLAlchemyError as e:
            logger.error("Interaction store query failed", operation=operation, error=str(e))
            raise InteractionStoreError(operation, e) from e

    async def get_all_views(self) -> list[ViewEvent]:
        result = await self._execute(
            "get_all_views",
            "SELECT user_id, product_id, viewed_at FROM user_product_views",
        )
        return [
            ViewEvent(user_id=r.user_id, product_id=r.product_id, viewed_at=r.viewed_at)
            for r in result.fetchall()
        ]

    async def get_all_likes(self) -> list[LikeEvent]:
        result = await self._execute(
            "get_all_likes",
            "SELECT user_id, product_id, liked_at FROM user_product_likes",
        )
        return [
            LikeEvent(user_id=r.user_id, product_id=r.product_id, liked_at=r.liked_at)
            for r in result.fetchall()
        ]

    async def get_all_purchases(self) -> list[PurchaseEvent]:
        result = await self._execute(
            "get_all_purchases",
            """
            SELECT user_id, product_id, quantity, price_at_purchase, purchased_at
            FROM user_product_purchases
            """,
        )
        return [
            PurchaseEvent(
                user_id=r.user_id,
                product_id=r.product_id,
                quantity=r.quantity,
                price_at_purchase=float(r.price_at_purchase),
                purchased_at=r.purchased_at,
            )
            for r in result.fetchall()
        ]

    async def record_view(self, user_id: int, product_id: int) -> None:
        await self._execute(
            "record_view",
            """
            INSERT INTO user_product_views (user_id, product_id, viewed_at)
            VALUES (:user_id, :product_id, NOW())
            """,
            {"user_id": user_id, "product_id": product_id},
        )

    async def record_like(self, user_id: int, product_id: int) -> bool:
        """Record a like. Returns False if the user already liked the product."""
        result = await self._execute(
            "record_like",
            """
            INSERT INTO user_product_likes (user_id, product_id, liked_at)
            VALUES (:user_id, :product_id, NOW())
            ON CONFLICT (user_id, product_id) DO NOTHING
            RETURNING id
            """,
            {"user_id": user_id, "product_id": product_id},
        )
        return result.scalar_one_or_none() is not None

    async def remove_like(self, user_id: int, product_id: int) -> bool:
        """Delete a like. Returns False if there was nothing to delete."""
        result = await self._execute(
            "remove_like",
            """
            DELETE FROM user_product_likes
            WHERE user_id = :user_id AND product_id = :product_id
            RETURNING id
            """,
            {"user_id": user_id, "product_id": product_id},
        )
        return result.scalar_one_or_none() is not None

    async def record_purchase(
        self, user_id: int, product_id: int, quantity: int, price: float
    ) -> None:
        await self._execute(
            "record_purchase",
            """
            INSERT INTO user_product_purchases
            (user_id, product_id, quantity, price_at_purchase, purchased_at)
            VALUES (:user_id, :product_id, :quantity, :price, NOW())
            """,
            {
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
                "price": price,
            },
        )

    async def get_user_history(
        self, user_id: int, interaction_type: InteractionType, limit: int
    ) -> list[ProductInteraction]:
        result = await self._execute(
            f"get_user_history:{interaction_type.value}",
            _HISTORY_QUERIES[interaction_type],
            {"user_id": user_id, "limit": limit},
        )
        return [
            ProductInteraction(
                product_id=r.product_id,
                product_name=r.name,
                category_id=r.category_id or 0,
                price=float(r.price),
                interacted_at=r.interacted_at,
            )
            for r in result.fetchall()
        ]

    async def count_user_interactions(self, user_id: int) -> dict[InteractionType, int]:
        result = await self._execute(
            "count_user_interactions",
            """
            SELECT
                (SELECT COUNT(*) FROM user_product_views WHERE user_id = :user_id) AS views,
                (SELECT COUNT(*) FROM user_product_likes WHERE user_id = :user_id) AS likes,
                (SELECT COUNT(*) FROM user_product_purchases WHERE user_id = :user_id) AS purchases
            """,
            {"user_id": user_id},
        )
        row = result.fetchone()
        return {
            InteractionType.VIEW: row.views,
            InteractionType.LIKE: row.likes,
            InteractionType.PURCHASE: row.purchases,
        }

    async def has_liked(self, user_id: int, product_id: int) -> bool:
        result = await self._execute(
            "has_liked",
            """
            SELECT EXISTS (
                SELECT 1 FROM user_product_likes
                WHERE user_id = :user_id AND product_id = :product_id
            )
            """,
            {"user_id": user_id, "product_id": product_id},
        )
        return bool(result.scalar_one_or_none())

    async def has_purchased(self, user_id: int, product_id: int) -> bool:
        result = await self._execute(
            "has_purchased",
            """
            SELECT EXISTS (
                SELECT 1 FROM user_product_purchases
                WHERE user_id = :user_id AND product_id = :product_id
            )
            """,
            {"user_id": user_id, "product_id": product_id},
        )
        return bool(result.scalar_one_or_none())
