#!/usr/bin/env python3
"""
Seed database with demo catalog and interaction data for development.

Usage:
    alembic upgrade head
    python scripts/seed_data.py
"""

import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ecomm_recommender.infrastructure.database.connection import (  # noqa: E402
    dispose_engine,
    get_db_session,
)
from ecomm_recommender.infrastructure.database.models import (  # noqa: E402
    Category,
    Product,
    UserProductLike,
    UserProductPurchase,
    UserProductView,
)

CATEGORIES = ["Electronics", "Furniture", "Accessories"]

PRODUCTS = [
    ("Wireless Noise-Canceling Headphones", "Electronics", "299.99", 50),
    ("Mechanical Gaming Keyboard", "Electronics", "149.99", 100),
    ("Ergonomic Office Chair", "Furniture", "399.99", 25),
    ("4K Ultra HD Monitor", "Electronics", "449.99", 30),
    ("Standing Desk Converter", "Furniture", "199.99", 40),
    ("Wireless Mouse", "Electronics", "79.99", 150),
    ("USB-C Hub", "Electronics", "49.99", 200),
    ("Desk Lamp", "Furniture", "59.99", 75),
    ("Webcam HD 1080p", "Electronics", "89.99", 60),
    ("Laptop Stand", "Accessories", "39.99", 120),
]

# user_id -> (viewed, liked, purchased) product positions in PRODUCTS
USER_ACTIVITY = {
    # Alice: electronics enthusiast
    1: ([0, 1, 3, 5, 8], [0, 3], [0]),
    # Bob: overlaps with Alice, also bought a keyboard
    2: ([0, 1, 5, 6], [0, 1], [0, 1]),
    # Charlie: furniture browser
    3: ([2, 4, 7], [2, 7], [2]),
    # Dana: home office setup, bridges both groups
    4: ([2, 3, 4, 9], [3, 9], [2, 9]),
    # Eve: only views so far
    5: ([1, 6], [], []),
}


async def seed_catalog(session) -> list[Product]:
    """Seed categories and products."""
    categories = {name: Category(name=name) for name in CATEGORIES}
    session.add_all(categories.values())
    await session.flush()

    products = [
        Product(
            name=name,
            category_id=categories[category].id,
            price=Decimal(price),
            stock=stock,
            image_url=f"https://example.com/products/{index + 1}.jpg",
        )
        for index, (name, category, price, stock) in enumerate(PRODUCTS)
    ]
    session.add_all(products)
    await session.flush()

    print(f"Created {len(categories)} categories and {len(products)} products")
    return products


async def seed_interactions(session, products: list[Product]) -> None:
    """Seed views, likes and purchases."""
    now = datetime.now(timezone.utc)
    counts = {"views": 0, "likes": 0, "purchases": 0}

    for user_id, (viewed, liked, purchased) in USER_ACTIVITY.items():
        for hours, position in enumerate(viewed):
            session.add(
                UserProductView(
                    user_id=user_id,
                    product_id=products[position].id,
                    viewed_at=now - timedelta(days=user_id, hours=hours),
                )
            )
            counts["views"] += 1

        for position in liked:
            session.add(
                UserProductLike(
                    user_id=user_id,
                    product_id=products[position].id,
                    liked_at=now - timedelta(days=user_id),
                )
            )
            counts["likes"] += 1

        for position in purchased:
            product = products[position]
            session.add(
                UserProductPurchase(
                    user_id=user_id,
                    product_id=product.id,
                    quantity=1,
                    price_at_purchase=product.price,
                    purchased_at=now - timedelta(hours=12 * user_id),
                )
            )
            product.stock -= 1
            counts["purchases"] += 1

    print(
        f"Created {counts['views']} views, {counts['likes']} likes "
        f"and {counts['purchases']} purchases"
    )


async def main() -> None:
    """Run seeding."""
    print("Seeding database with demo data...")
    print("=" * 50)

    try:
        async with get_db_session() as session:
            products = await seed_catalog(session)
            await seed_interactions(session, products)
    finally:
        await dispose_engine()

    print("=" * 50)
    print("Seeding complete!")
    print("Try: GET /api/v1/recommendations/users/1")


if __name__ == "__main__":
    asyncio.run(main())
