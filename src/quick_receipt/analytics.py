"""Spending analytics derived from the stored receipt records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from quick_receipt.config import MONTHLY_BUDGET_THRESHOLD

if TYPE_CHECKING:
    from collections.abc import Sequence

    from quick_receipt.models import ReceiptRecord

NO_CATEGORY = "none"

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)
YEAR = timedelta(days=365)

_ZERO = Decimal(0)


@dataclass(frozen=True)
class SpendingAnalytics:
    """Aggregates over a receipt sequence at a reference instant."""

    weekly: Decimal
    monthly: Decimal
    yearly: Decimal
    total_spent: Decimal
    receipt_count: int
    category_totals: dict[str, Decimal] = field(default_factory=dict)
    merchant_counts: dict[str, int] = field(default_factory=dict)

    @property
    def average_purchase(self) -> Decimal:
        if self.receipt_count == 0:
            return _ZERO
        return self.total_spent / self.receipt_count

    @property
    def shopping_frequency(self) -> int:
        """Estimated trips per month."""
        average = self.average_purchase
        if average <= 0:
            return 0
        return int((self.monthly / average).quantize(Decimal(1), ROUND_HALF_UP))

    @property
    def budget_alert(self) -> bool:
        return self.monthly > MONTHLY_BUDGET_THRESHOLD

    def ranked_categories(self) -> list[tuple[str, Decimal]]:
        """Categories by total, highest first; ties keep first-seen order."""
        return sorted(self.category_totals.items(), key=lambda kv: kv[1], reverse=True)

    def ranked_merchants(self) -> list[tuple[str, int]]:
        """Merchants by visit count, highest first; ties keep first-seen order."""
        return sorted(self.merchant_counts.items(), key=lambda kv: kv[1], reverse=True)

    @property
    def top_category(self) -> str:
        ranked = self.ranked_categories()
        return ranked[0][0] if ranked else NO_CATEGORY

    @property
    def top_category_total(self) -> Decimal:
        ranked = self.ranked_categories()
        return ranked[0][1] if ranked else _ZERO

    @property
    def top_merchant(self) -> str | None:
        ranked = self.ranked_merchants()
        return ranked[0][0] if ranked else None

    def category_share(self, category: str) -> Decimal:
        """Percentage of total spending that went to ``category``."""
        if self.total_spent <= 0:
            return _ZERO
        return self.category_totals.get(category, _ZERO) / self.total_spent * 100

    def recommendations(self) -> list[str]:
        """Human-readable suggestions shown on the insights view."""
        tips: list[str] = []
        if self.budget_alert:
            tips.append(f"Consider setting a monthly budget for: {self.top_category}")
        if self.top_merchant is not None:
            tips.append(
                f"You shop most at {self.top_merchant}. Check their loyalty program."
            )
        tips.append("Keep tracking receipts to maximize savings insights.")
        return tips


def compute_analytics(
    records: Sequence[ReceiptRecord], now: datetime
) -> SpendingAnalytics:
    """Aggregate ``records`` relative to ``now``.

    Pure function: identical inputs always give identical results. Window
    boundaries are inclusive. Records whose date cannot be parsed count
    toward category, merchant and overall totals but not toward any window.
    A naive ``now`` is treated as UTC.
    """
    now = as_utc(now)
    week_start = now - WEEK
    month_start = now - MONTH
    year_start = now - YEAR

    weekly = monthly = yearly = total = _ZERO
    category_totals: dict[str, Decimal] = {}
    merchant_counts: dict[str, int] = {}

    for record in records:
        amount = record.total_amount
        total += amount
        category_totals[record.category] = (
            category_totals.get(record.category, _ZERO) + amount
        )
        merchant_counts[record.merchant_name] = (
            merchant_counts.get(record.merchant_name, 0) + 1
        )

        when = parse_receipt_date(record.date)
        if when is None:
            continue
        if when >= week_start:
            weekly += amount
        if when >= month_start:
            monthly += amount
        if when >= year_start:
            yearly += amount

    return SpendingAnalytics(
        weekly=weekly,
        monthly=monthly,
        yearly=yearly,
        total_spent=total,
        receipt_count=len(records),
        category_totals=category_totals,
        merchant_counts=merchant_counts,
    )


def parse_receipt_date(value: str) -> datetime | None:
    """Parse an ISO receipt date; date-only values are midnight UTC.

    Returns None for anything unparsable.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, TypeError, AttributeError):
        return None
    return as_utc(parsed)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
