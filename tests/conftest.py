"""Shared test fixtures."""

from __future__ import annotations

import io
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from quick_receipt.models import ReceiptData, ReceiptRecord
from quick_receipt.store import LocalReceiptStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Provide a temporary directory as the receipt store root."""
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def store(store_root: Path) -> LocalReceiptStore:
    return LocalReceiptStore(store_root)


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Return a factory producing encoded images of a given size."""

    def _make(
        width: int, height: int, fmt: str = "JPEG", mode: str = "RGB"
    ) -> bytes:
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color="white").save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_record() -> Callable[..., ReceiptRecord]:
    """Return a factory for ReceiptRecords with sensible defaults."""

    def _make(
        merchant: str = "Trader Joe's",
        date: str = "2024-01-01",
        total: str = "10.00",
        category: str = "Groceries",
    ) -> ReceiptRecord:
        data = ReceiptData(
            merchant_name=merchant,
            date=date,
            total_amount=Decimal(total),
            category=category,
        )
        return ReceiptRecord.create(data, timestamp=datetime(2024, 1, 5, tzinfo=UTC))

    return _make


@pytest.fixture
def scenario_records(
    make_record: Callable[..., ReceiptRecord],
) -> list[ReceiptRecord]:
    """Three receipts across two merchants and two categories."""
    return [
        make_record(merchant="A", date="2024-01-01", total="10", category="Food"),
        make_record(merchant="A", date="2024-01-02", total="20", category="Food"),
        make_record(merchant="B", date="2024-01-03", total="5", category="Transport"),
    ]


@pytest.fixture
def receipt_json() -> str:
    """A well-formed extraction service response."""
    return (
        '{"merchantName": "Whole Foods", "date": "2024-03-09", '
        '"totalAmount": 42.17, "category": "Groceries"}'
    )


@pytest.fixture
def make_agent() -> Callable[..., MagicMock]:
    """Return a factory for mock agents whose run() yields ``output``."""

    def _make(output: str | None = None, error: Exception | None = None) -> MagicMock:
        agent = MagicMock()
        if error is not None:
            agent.run = AsyncMock(side_effect=error)
        else:
            result = MagicMock()
            result.output = output
            agent.run = AsyncMock(return_value=result)
        return agent

    return _make
