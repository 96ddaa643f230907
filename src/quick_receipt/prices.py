"""Nearby store price lookup.

This is a mock: there is no price provider behind it. It waits for an
artificial delay and returns the same fixed quotes every time.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from quick_receipt.models import StorePrice

logger = logging.getLogger(__name__)

MOCK_DELAY_SECONDS = 2.0

_MOCK_STORES = (
    ("Walmart", "45.99", "0.5 mi"),
    ("Target", "47.50", "0.8 mi"),
    ("Costco", "42.99", "1.2 mi"),
)


async def search_nearby_stores(delay: float = MOCK_DELAY_SECONDS) -> list[StorePrice]:
    """Return fixed mock price quotes after ``delay`` seconds."""
    logger.debug("Searching nearby stores (mock, %.1fs delay)", delay)
    await asyncio.sleep(delay)
    return [
        StorePrice(store=store, price=Decimal(price), distance=distance)
        for store, price, distance in _MOCK_STORES
    ]
