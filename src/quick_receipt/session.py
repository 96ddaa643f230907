"""Receipt scan session: the operation boundary for capture and export."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from quick_receipt.analytics import SpendingAnalytics, compute_analytics
from quick_receipt.errors import PersistenceError, ReceiptScanError
from quick_receipt.export import export_filename, render_workbook
from quick_receipt.extraction import extract_receipt
from quick_receipt.imaging import normalize_image
from quick_receipt.models import ReceiptData, ReceiptRecord

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date
    from pathlib import Path

    from pydantic_ai import Agent

    from quick_receipt.store import ReceiptStore

logger = logging.getLogger(__name__)

SCAN_FAILED_MESSAGE = "Failed to scan receipt. Please try again."


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class ScanOutcome:
    """Result of one scan attempt; exactly one of record/error is set."""

    record: ReceiptRecord | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class ReceiptSession:
    """In-memory view of the receipt store plus the scan pipeline.

    The store is the source of truth: a record only joins ``receipts``
    once it has been written. The most recent successful extraction
    stays available as ``latest_scan`` until the next scan starts.
    """

    def __init__(
        self,
        store: ReceiptStore,
        *,
        agent: Agent[None, str] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.agent = agent
        self.clock = clock
        self.receipts: list[ReceiptRecord] = store.list_all()
        self.latest_scan: ReceiptData | None = None
        self.error: str | None = None

    async def scan(self, image_bytes: bytes) -> ScanOutcome:
        """Normalize, extract and store one receipt image.

        Never raises for pipeline failures: they are logged and reported
        through the returned outcome and ``self.error``.
        """
        self.latest_scan = None
        self.error = None
        try:
            image = await asyncio.to_thread(normalize_image, image_bytes)
            data = await extract_receipt(image, agent=self.agent)
            record = ReceiptRecord.create(data, timestamp=self.clock())
            self.store.append(record)
        except ReceiptScanError:
            logger.warning("Receipt scan failed", exc_info=True)
            self.error = SCAN_FAILED_MESSAGE
            return ScanOutcome(error=SCAN_FAILED_MESSAGE)

        self.receipts.append(record)
        self.latest_scan = data
        logger.info(
            "Scanned receipt %s from %s (%s)",
            record.id,
            record.merchant_name,
            record.total_amount,
        )
        return ScanOutcome(record=record)

    def recent(self) -> list[ReceiptRecord]:
        """Receipts most-recent-first for display."""
        return list(reversed(self.receipts))

    def analytics(self, now: datetime | None = None) -> SpendingAnalytics:
        if now is None:
            now = self.clock()
        return compute_analytics(self.receipts, now)

    def export(self, directory: Path, today: date | None = None) -> Path:
        """Write the spreadsheet export into ``directory`` and return its path."""
        now = self.clock()
        content = render_workbook(self.receipts, self.analytics(now))
        target = directory / export_filename(today or now.date())
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            msg = f"Could not write export {target}: {exc}"
            raise PersistenceError(msg) from exc
        logger.info("Exported %d receipts to %s", len(self.receipts), target)
        return target
