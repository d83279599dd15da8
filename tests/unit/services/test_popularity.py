"""Unit tests for the popularity fallback."""

import pytest

from ecomm_recommender.services.popularity import PopularityRanker


@pytest.fixture
def ranker(catalog) -> PopularityRanker:
    return PopularityRanker(catalog)


class TestPopularityRanker:
    """Tests for most-liked product ranking."""

    @pytest.mark.asyncio
    async def test_normalized_to_top_product(self, store, ranker) -> None:
        for user_id in range(1, 6):
            store.add_like(user_id, 4)
        for user_id in range(1, 3):
            store.add_like(user_id, 5)

        result = await ranker.rank(store.likes)

        assert [item.product_id for item in result] == [4, 5]
        assert result[0].score == pytest.approx(1.0)
        assert result[1].score == pytest.approx(0.4)

    @pytest.mark.asyncio
    async def test_reason_carries_like_count(self, store, ranker) -> None:
        for user_id in range(1, 4):
            store.add_like(user_id, 2)

        result = await ranker.rank(store.likes)

        assert result[0].reason == "Popular choice - 3 users liked this"

    @pytest.mark.asyncio
    async def test_no_likes_returns_empty(self, ranker) -> None:
        assert await ranker.rank([]) == []

    @pytest.mark.asyncio
    async def test_ties_broken_by_product_id(self, store, ranker) -> None:
        store.add_like(1, 9)
        store.add_like(2, 7)
        store.add_like(3, 8)

        result = await ranker.rank(store.likes)

        assert [item.product_id for item in result] == [7, 8, 9]
        assert all(item.score == pytest.approx(1.0) for item in result)

    @pytest.mark.asyncio
    async def test_truncates_to_limit(self, store, ranker) -> None:
        for product_id in range(1, 16):
            store.add_like(1, product_id)

        assert len(await ranker.rank(store.likes, limit=4)) == 4

    @pytest.mark.asyncio
    async def test_missing_product_skipped_and_next_becomes_top(self, store, ranker) -> None:
        for user_id in range(1, 5):
            store.add_like(user_id, 99)
        store.add_like(1, 4)
        store.add_like(2, 4)
        store.add_like(3, 5)

        result = await ranker.rank(store.likes)

        assert [item.product_id for item in result] == [4, 5]
        assert result[0].score == pytest.approx(1.0)
        assert result[1].score == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_scores_never_increase(self, store, ranker) -> None:
        for product_id, likes in [(1, 6), (2, 3), (3, 3), (4, 1)]:
            for user_id in range(likes):
                store.add_like(100 + user_id, product_id)

        scores = [item.score for item in await ranker.rank(store.likes)]

        assert scores == sorted(scores, reverse=True)
        assert all(0.0 < score <= 1.0 for score in scores)
