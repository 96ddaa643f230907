"""Tests for quick_receipt.models."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import ValidationError

from quick_receipt.models import ReceiptData, ReceiptRecord, StorePrice


class TestReceiptData:
    """Tests for ReceiptData validation."""

    def test_accepts_camel_case_keys(self) -> None:
        data = ReceiptData.model_validate(
            {
                "merchantName": "Costco",
                "date": "2024-05-01",
                "totalAmount": 157.32,
                "category": "Groceries",
            }
        )
        assert data.merchant_name == "Costco"
        assert data.total_amount == Decimal("157.32")
        assert data.items is None
        assert data.location is None

    def test_accepts_snake_case_names(self) -> None:
        data = ReceiptData(
            merchant_name="Costco",
            date="2024-05-01",
            total_amount=Decimal("1.50"),
            category="Groceries",
            items=["Milk", "Eggs"],
            location="Seattle, WA",
        )
        assert data.items == ["Milk", "Eggs"]
        assert data.location == "Seattle, WA"

    def test_dumps_camel_case(self) -> None:
        data = ReceiptData(
            merchant_name="Costco",
            date="2024-05-01",
            total_amount=Decimal("1.50"),
            category="Groceries",
        )
        dumped = data.model_dump(by_alias=True)
        assert dumped["merchantName"] == "Costco"
        assert dumped["totalAmount"] == Decimal("1.50")

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValidationError, match="total_amount|totalAmount"):
            ReceiptData(
                merchant_name="Costco",
                date="2024-05-01",
                total_amount=Decimal("-1"),
                category="Groceries",
            )

    def test_zero_amount_allowed(self) -> None:
        data = ReceiptData(
            merchant_name="Free Sample",
            date="2024-05-01",
            total_amount=Decimal("0"),
            category="Other",
        )
        assert data.total_amount == 0

    def test_empty_merchant_rejected(self) -> None:
        with pytest.raises(ValidationError, match="merchant_name|merchantName"):
            ReceiptData(
                merchant_name="",
                date="2024-05-01",
                total_amount=Decimal("1"),
                category="Groceries",
            )

    def test_open_category_domain(self) -> None:
        data = ReceiptData(
            merchant_name="Vet",
            date="2024-05-01",
            total_amount=Decimal("80"),
            category="Pet Care & Grooming",
        )
        assert data.category == "Pet Care & Grooming"


class TestReceiptRecord:
    """Tests for ReceiptRecord creation and immutability."""

    def _data(self) -> ReceiptData:
        return ReceiptData(
            merchant_name="Target",
            date="2024-02-10",
            total_amount=Decimal("23.45"),
            category="Household",
        )

    def test_create_assigns_id_and_timestamp(self) -> None:
        ts = datetime(2024, 2, 10, 12, 0, tzinfo=UTC)
        record = ReceiptRecord.create(self._data(), timestamp=ts)
        assert isinstance(record.id, UUID)
        assert record.timestamp == ts
        assert record.merchant_name == "Target"
        assert record.total_amount == Decimal("23.45")

    def test_ids_are_unique(self) -> None:
        ts = datetime(2024, 2, 10, tzinfo=UTC)
        ids = {ReceiptRecord.create(self._data(), timestamp=ts).id for _ in range(50)}
        assert len(ids) == 50

    def test_record_is_frozen(self) -> None:
        record = ReceiptRecord.create(self._data(), timestamp=datetime.now(tz=UTC))
        with pytest.raises(ValidationError):
            record.total_amount = Decimal("1")  # type: ignore[misc]

    def test_json_roundtrip(self) -> None:
        record = ReceiptRecord.create(
            self._data(), timestamp=datetime(2024, 2, 10, 9, 30, tzinfo=UTC)
        )
        dumped = record.model_dump_json(by_alias=True)
        restored = ReceiptRecord.model_validate_json(dumped)
        assert restored == record


class TestStorePrice:
    """Tests for StorePrice."""

    def test_distance_optional(self) -> None:
        quote = StorePrice(store="Aldi", price=Decimal("39.99"))
        assert quote.distance is None
