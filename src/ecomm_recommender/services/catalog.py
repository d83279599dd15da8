"""Product catalog lookups."""

from dataclasses import dataclass
from typing import Protocol

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecomm_recommender.exceptions import CatalogError, ProductNotFoundError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    category_id: int | None = None
    stock: int = 0


class ProductCatalog(Protocol):
    """Lookup of product metadata by id."""

    async def get_product_by_id(self, product_id: int) -> Product:
        """Return the product or raise ProductNotFoundError."""
        ...

    async def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """Take quantity units out of stock. False if not enough are left."""
        ...


class SqlProductCatalog:
    """Catalog backed by the products table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_product_by_id(self, product_id: int) -> Product:
        query = text("""
            SELECT id, name, category_id, price, stock
            FROM products
            WHERE id = :product_id
        """)
        try:
            result = await self.session.execute(query, {"product_id": product_id})
        except SQLAlchemyError as e:
            logger.error("Catalog lookup failed", product_id=product_id, error=str(e))
            raise CatalogError("get_product_by_id", e) from e

        row = result.fetchone()
        if row is None:
            raise ProductNotFoundError(product_id)

        return Product(
            id=row.id,
            name=row.name,
            category_id=row.category_id,
            price=float(row.price),
            stock=row.stock,
        )

    async def decrement_stock(self, product_id: int, quantity: int) -> bool:
        # Guarded update so concurrent purchases cannot drive stock negative
        query = text("""
            UPDATE products
            SET stock = stock - :quantity, updated_at = NOW()
            WHERE id = :product_id AND stock >= :quantity
            RETURNING stock
        """)
        try:
            result = await self.session.execute(
                query, {"product_id": product_id, "quantity": quantity}
            )
        except SQLAlchemyError as e:
            logger.error("Stock update failed", product_id=product_id, error=str(e))
            raise CatalogError("decrement_stock", e) from e

        return result.scalar_one_or_none() is not None
