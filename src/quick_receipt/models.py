"""Domain models for captured receipts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReceiptData(BaseModel):
    """Structured receipt fields extracted from a photo.

    Serialized with camelCase keys (``merchantName``, ``totalAmount``) to
    match the extraction response and the stored JSON document.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    merchant_name: str = Field(min_length=1)
    date: str
    total_amount: Decimal = Field(ge=0)
    category: str
    items: list[str] | None = None
    location: str | None = None


class ReceiptRecord(ReceiptData):
    """A persisted receipt: extracted fields plus identity and creation time."""

    id: UUID
    timestamp: datetime

    @classmethod
    def create(cls, data: ReceiptData, timestamp: datetime) -> ReceiptRecord:
        """Build a new record with a freshly generated id."""
        return cls(
            **data.model_dump(),
            id=uuid4(),
            timestamp=timestamp,
        )


class StorePrice(BaseModel):
    """A nearby store's price quote (mock data only)."""

    store: str
    price: Decimal
    distance: str | None = None


class PantryItem(BaseModel):
    """A food item detected in a pantry photo."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str = Field(min_length=1)
    quantity: str = ""
    expiry_date: str | None = None
    is_opened: bool = False


class Recipe(BaseModel):
    """A recipe suggestion built from pantry items."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    ingredients: list[str] = Field(default_factory=list)
    match_score: int = Field(default=0, ge=0, le=100)
    time_to_cook: str | None = None


@dataclass(frozen=True)
class NormalizedImage:
    """A re-encoded image ready for upload."""

    data: bytes
    width: int
    height: int
    media_type: str = "image/jpeg"
