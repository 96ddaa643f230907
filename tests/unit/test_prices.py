"""Tests for quick_receipt.prices."""

from __future__ import annotations

from decimal import Decimal

import pytest

from quick_receipt.prices import search_nearby_stores


class TestSearchNearbyStores:
    """Tests for the mock store price search."""

    @pytest.mark.asyncio
    async def test_returns_fixed_quotes(self) -> None:
        quotes = await search_nearby_stores(delay=0)
        assert [(q.store, q.price, q.distance) for q in quotes] == [
            ("Walmart", Decimal("45.99"), "0.5 mi"),
            ("Target", Decimal("47.50"), "0.8 mi"),
            ("Costco", Decimal("42.99"), "1.2 mi"),
        ]

    @pytest.mark.asyncio
    async def test_same_result_every_call(self) -> None:
        assert await search_nearby_stores(delay=0) == await search_nearby_stores(
            delay=0
        )
