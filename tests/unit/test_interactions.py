"""Unit tests for interaction endpoints."""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient


def test_record_view(client: TestClient, store) -> None:
    """Test recording a product view."""
    response = client.post("/api/v1/interactions/views", json={"user_id": 1, "product_id": 2})
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert "recorded_at" in data
    assert len(store.views) == 1


def test_record_view_unknown_product(client: TestClient) -> None:
    """Test that viewing a missing product returns 404."""
    response = client.post("/api/v1/interactions/views", json={"user_id": 1, "product_id": 99})
    assert response.status_code == 404
    assert response.json()["details"] == {"product_id": 99}


def test_record_view_requires_product_id(client: TestClient) -> None:
    """Test that the payload is validated."""
    response = client.post("/api/v1/interactions/views", json={"user_id": 1})
    assert response.status_code == 422


def test_like_twice(client: TestClient) -> None:
    """Test that liking is idempotent."""
    payload = {"user_id": 1, "product_id": 2}

    first = client.post("/api/v1/interactions/likes", json=payload)
    second = client.post("/api/v1/interactions/likes", json=payload)

    assert first.json()["created"] is True
    assert second.status_code == 200
    assert second.json()["created"] is False


def test_unlike(client: TestClient, store) -> None:
    """Test removing a like."""
    store.add_like(1, 2)

    response = client.delete("/api/v1/interactions/likes/1/2")

    assert response.status_code == 200
    assert store.likes == []


def test_unlike_missing_like(client: TestClient) -> None:
    """Test removing a like that does not exist."""
    response = client.delete("/api/v1/interactions/likes/1/2")
    assert response.status_code == 404


def test_purchase(client: TestClient, catalog) -> None:
    """Test recording a purchase."""
    response = client.post(
        "/api/v1/interactions/purchases",
        json={"user_id": 1, "product_id": 4, "quantity": 2},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["quantity"] == 2
    assert data["price_at_purchase"] == 399.99
    assert catalog.products[4].stock == 23


def test_purchase_defaults_to_one_unit(client: TestClient, catalog) -> None:
    """Test that quantity defaults to 1."""
    response = client.post("/api/v1/interactions/purchases", json={"user_id": 1, "product_id": 5})
    assert response.json()["quantity"] == 1
    assert catalog.products[5].stock == 74


def test_purchase_invalid_quantity(client: TestClient) -> None:
    """Test that a zero quantity is rejected."""
    response = client.post(
        "/api/v1/interactions/purchases",
        json={"user_id": 1, "product_id": 4, "quantity": 0},
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"quantity": 0}


def test_purchase_out_of_stock(client: TestClient) -> None:
    """Test that buying an out-of-stock product returns 409."""
    response = client.post(
        "/api/v1/interactions/purchases",
        json={"user_id": 1, "product_id": 6, "quantity": 1},
    )
    assert response.status_code == 409
    assert response.json()["details"]["available"] == 0


def test_interaction_summary(client: TestClient, store) -> None:
    """Test the per-user interaction summary."""
    store.add_view(1, 1)
    store.add_like(1, 2)
    store.add_purchase(1, 3)

    response = client.get("/api/v1/interactions/users/1/summary")
    assert response.status_code == 200

    data = response.json()
    assert data["user_id"] == 1
    assert data["viewed_products"][0]["product_name"] == "Wireless Headphones"
    assert data["purchased_products"][0]["category_id"] == 0
    assert (data["total_views"], data["total_likes"], data["total_purchases"]) == (1, 1, 1)


def test_interactions_feed_recommendations(client: TestClient) -> None:
    """Test that recorded interactions drive collaborative recommendations."""
    for user_id, product_id in [(1, 1), (2, 1), (2, 2)]:
        client.post(
            "/api/v1/interactions/purchases",
            json={"user_id": user_id, "product_id": product_id},
        )

    data = client.get("/api/v1/recommendations/users/1").json()

    assert data["algorithm"] == "collaborative_filtering"
    assert [item["product_id"] for item in data["recommendations"]] == [2]


@pytest.mark.parametrize("raw", ["abc", "", "2.5", "0", "101"])
def test_summary_invalid_limit_falls_back(client: TestClient, store, raw: str) -> None:
    """Test that an unusable summary limit falls back to 50 entries per list."""
    for index in range(60):
        store.add_view(1, 1 + index % 15)

    response = client.get("/api/v1/interactions/users/1/summary", params={"limit": raw})

    assert response.status_code == 200
    data = response.json()
    assert len(data["viewed_products"]) == 50
    assert data["total_views"] == 60


def test_view_history(client: TestClient, store) -> None:
    """Test the per-type view history, newest first."""
    store.add_view(1, 1)
    store.add_view(1, 2)
    store.add_like(1, 3)

    response = client.get("/api/v1/interactions/users/1/history/view")
    assert response.status_code == 200

    data = response.json()
    assert data["interaction_type"] == "view"
    assert data["count"] == 2
    assert [item["product_id"] for item in data["products"]] == [2, 1]


def test_purchase_history_reports_price_paid(client: TestClient, store, catalog) -> None:
    """Test that purchase history keeps the price at purchase time."""
    store.add_purchase(1, 4)
    catalog.products[4] = replace(catalog.products[4], price=499.99)

    data = client.get("/api/v1/interactions/users/1/history/purchase").json()

    assert data["products"][0]["price"] == 399.99


@pytest.mark.parametrize("raw", ["x", "", "2.5"])
def test_history_invalid_limit_falls_back(client: TestClient, store, raw: str) -> None:
    """Test that the history limit is never rejected."""
    for index in range(60):
        store.add_view(1, 1 + index % 15)

    response = client.get("/api/v1/interactions/users/1/history/view", params={"limit": raw})

    assert response.status_code == 200
    assert response.json()["count"] == 50


def test_history_limit(client: TestClient, store) -> None:
    """Test that a valid history limit truncates the list."""
    for product_id in range(1, 8):
        store.add_view(1, product_id)

    data = client.get("/api/v1/interactions/users/1/history/view?limit=3").json()

    assert data["count"] == 3


def test_history_unknown_type(client: TestClient) -> None:
    """Test that only view, like and purchase histories exist."""
    response = client.get("/api/v1/interactions/users/1/history/cart")
    assert response.status_code == 422


def test_product_interaction_status(client: TestClient, store) -> None:
    """Test the liked/purchased checks for a single product."""
    store.add_like(1, 2)
    store.add_purchase(1, 3)

    liked = client.get("/api/v1/interactions/users/1/products/2").json()
    bought = client.get("/api/v1/interactions/users/1/products/3").json()
    untouched = client.get("/api/v1/interactions/users/1/products/4").json()

    assert (liked["liked"], liked["purchased"]) == (True, False)
    assert (bought["liked"], bought["purchased"]) == (False, True)
    assert (untouched["liked"], untouched["purchased"]) == (False, False)


def test_unlike_clears_liked_status(client: TestClient, store) -> None:
    """Test that the liked check reflects a removed like."""
    store.add_like(1, 2)
    client.delete("/api/v1/interactions/likes/1/2")

    data = client.get("/api/v1/interactions/users/1/products/2").json()

    assert data["liked"] is False
