"""Pantry item detection and recipe suggestions."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError
from pydantic_ai import BinaryContent

from quick_receipt.analytics import as_utc, parse_receipt_date
from quick_receipt.errors import ExtractionParseError
from quick_receipt.extraction import create_agent, load_json, run_agent
from quick_receipt.models import PantryItem, Recipe

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from pydantic_ai import Agent

    from quick_receipt.models import NormalizedImage

logger = logging.getLogger(__name__)

OPENED_BONUS = 10
EXPIRED_BONUS = 20
EXPIRES_SOON_BONUS = 15  # within 3 days
EXPIRES_THIS_WEEK_BONUS = 5  # within 7 days

_SECONDS_PER_DAY = 24 * 60 * 60

_PANTRY_PROMPT = """\
You are a pantry inventory expert. Analyze the image and identify food items, \
ingredients, and pantry staples such as canned goods, pasta, rice, grains, \
spices, oils, condiments, snacks, breakfast items and beverages.

Return ONLY a JSON array of items with this structure:
[{"name": "item name", "quantity": "estimated quantity or count", \
"expiryDate": "YYYY-MM-DD if visible, otherwise omit"}]

Be conservative - only include items you can clearly identify.\
"""

_RECIPE_PROMPT = """\
You are a creative chef who specializes in creating recipes from available \
ingredients. Given a list of pantry items, suggest 3 recipes that:
1. Primarily use the provided ingredients
2. Prioritize ingredients listed first, as they are opened or expiring soon
3. Are realistic and achievable for home cooking
4. Require minimal additional ingredients (max 2-3 common items not in the list)

Return ONLY a JSON array with this structure:
[{"id": "recipe_1", "name": "Recipe Name", "ingredients": ["ingredient1"], \
"matchScore": 85, "timeToCook": "30 mins"}]

matchScore is a percentage (0-100) of how well the recipe matches the \
available ingredients.\
"""

_ITEMS = TypeAdapter(list[PantryItem])
_RECIPES = TypeAdapter(list[Recipe])


@dataclass(frozen=True)
class RankedPantryItem:
    """A pantry item with its use-first priority score."""

    item: PantryItem
    priority: int


def create_pantry_agent() -> Agent[None, str]:
    """Create a pydantic-ai Agent configured for pantry photos."""
    return create_agent(_PANTRY_PROMPT)


def create_recipe_agent() -> Agent[None, str]:
    """Create a pydantic-ai Agent configured for recipe suggestions."""
    return create_agent(_RECIPE_PROMPT)


async def detect_pantry_items(
    image: NormalizedImage,
    *,
    agent: Agent[None, str] | None = None,
) -> list[PantryItem]:
    """Identify the food items visible in a pantry photo."""
    output = await run_agent(
        agent,
        [
            "Identify all pantry and food items in this image.",
            BinaryContent(data=image.data, media_type=image.media_type),
        ],
        factory=create_pantry_agent,
    )
    return parse_pantry_response(output)


def parse_pantry_response(text: str | None) -> list[PantryItem]:
    """Parse a JSON array of pantry items."""
    payload = load_json(text)
    if not isinstance(payload, list):
        msg = f"Pantry response is not a JSON array: {type(payload).__name__}"
        raise ExtractionParseError(msg)
    try:
        return _ITEMS.validate_python(payload)
    except ValidationError as exc:
        msg = f"Pantry response has invalid items: {exc}"
        raise ExtractionParseError(msg) from exc


def days_until_expiry(item: PantryItem, now: datetime) -> int | None:
    """Whole days (rounded up) until the item expires, or None if unknown."""
    if not item.expiry_date:
        return None
    expires = parse_receipt_date(item.expiry_date)
    if expires is None:
        return None
    remaining = expires - as_utc(now)
    return math.ceil(remaining.total_seconds() / _SECONDS_PER_DAY)


def pantry_priority(item: PantryItem, now: datetime) -> int:
    """Score how urgently ``item`` should be used; higher is sooner."""
    priority = OPENED_BONUS if item.is_opened else 0
    days = days_until_expiry(item, now)
    if days is None:
        return priority
    if days < 0:
        priority += EXPIRED_BONUS
    elif days <= 3:
        priority += EXPIRES_SOON_BONUS
    elif days <= 7:
        priority += EXPIRES_THIS_WEEK_BONUS
    return priority


def prioritize_items(
    items: Sequence[PantryItem], now: datetime
) -> list[RankedPantryItem]:
    """Rank items by priority, highest first; ties keep input order.

    A naive ``now`` is treated as UTC.
    """
    ranked = [RankedPantryItem(item, pantry_priority(item, now)) for item in items]
    return sorted(ranked, key=lambda r: r.priority, reverse=True)


async def find_recipes(
    items: Sequence[PantryItem],
    now: datetime,
    *,
    agent: Agent[None, str] | None = None,
) -> list[Recipe]:
    """Ask for recipes that use the most urgent pantry items first.

    Returns an empty list without calling the service when ``items`` is empty.
    """
    if not items:
        return []

    names = ", ".join(r.item.name for r in prioritize_items(items, now))
    logger.debug("Requesting recipes for: %s", names)
    output = await run_agent(
        agent,
        f"I have these pantry items: {names}\n\n"
        "Please suggest 3 recipes that would work well with these ingredients, "
        "prioritizing items that need to be used soon.",
        factory=create_recipe_agent,
    )
    return parse_recipe_response(output)


def parse_recipe_response(text: str | None) -> list[Recipe]:
    """Parse a JSON array of recipe suggestions."""
    payload = load_json(text)
    if not isinstance(payload, list):
        msg = f"Recipe response is not a JSON array: {type(payload).__name__}"
        raise ExtractionParseError(msg)
    try:
        return _RECIPES.validate_python(payload)
    except ValidationError as exc:
        msg = f"Recipe response has invalid recipes: {exc}"
        raise ExtractionParseError(msg) from exc
