"""Unit tests for request parsing helpers."""

import pytest

from ecomm_recommender.api.dependencies import parse_limit


class TestParseLimit:
    """Tests for lenient limit parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("5", 5), (" 7 ", 7), ("-3", -3), ("0", 0), ("+4", 4)],
    )
    def test_integers_pass_through(self, raw: str, expected: int) -> None:
        assert parse_limit(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "2.5", "1e3", "ten"])
    def test_everything_else_is_none(self, raw: str | None) -> None:
        assert parse_limit(raw) is None
