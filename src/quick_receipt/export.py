"""Spreadsheet export of receipts and their analytics."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any

import xlsxwriter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from quick_receipt.analytics import SpendingAnalytics
    from quick_receipt.models import ReceiptRecord

logger = logging.getLogger(__name__)

RECEIPTS_SHEET = "Receipts"
ANALYTICS_SHEET = "Analytics"
CATEGORIES_SHEET = "Categories"


def export_filename(today: date) -> str:
    """Return the download name for an export made on ``today``."""
    return f"QuickReceipt_Export_{today.isoformat()}.xlsx"


def build_sheets(
    records: Sequence[ReceiptRecord], analytics: SpendingAnalytics
) -> dict[str, list[list[Any]]]:
    """Lay out the three export sheets as rows, header row first."""
    receipts: list[list[Any]] = [["Date", "Merchant", "Category", "Amount"]]
    for record in records:
        receipts.append(
            [record.date, record.merchant_name, record.category, record.total_amount]
        )

    periods: list[list[Any]] = [
        ["Period", "Total"],
        ["Weekly", analytics.weekly],
        ["Monthly", analytics.monthly],
        ["Yearly", analytics.yearly],
    ]

    categories: list[list[Any]] = [["Category", "Total"]]
    for category, total in analytics.category_totals.items():
        categories.append([category, total])

    return {
        RECEIPTS_SHEET: receipts,
        ANALYTICS_SHEET: periods,
        CATEGORIES_SHEET: categories,
    }


def render_workbook(
    records: Sequence[ReceiptRecord], analytics: SpendingAnalytics
) -> bytes:
    """Render the export workbook to .xlsx bytes."""
    buffer = io.BytesIO()
    # Extracted text is untrusted: keep every string a literal cell value
    workbook = xlsxwriter.Workbook(
        buffer,
        {
            "in_memory": True,
            "strings_to_formulas": False,
            "strings_to_urls": False,
        },
    )
    try:
        for name, rows in build_sheets(records, analytics).items():
            worksheet = workbook.add_worksheet(name)
            for row_idx, row in enumerate(rows):
                worksheet.write_row(row_idx, 0, [_cell(value) for value in row])
    finally:
        workbook.close()

    logger.debug("Rendered export workbook with %d receipts", len(records))
    return buffer.getvalue()


def _cell(value: Any) -> Any:
    """Convert Decimal amounts to floats for spreadsheet cells."""
    if isinstance(value, (str, int)):
        return value
    return float(value)
