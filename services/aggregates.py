"""
services/aggregates.py
----------------------
Aggregate engine: derived views and sums over the live record set.

Every function takes the full record sequence (as held by the store) and
filters to active records itself. Nothing is cached; callers recompute
after each mutation. Empty input yields zero, empty lists or None,
never an exception.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from models.subscription import BillingCycle, SubscriptionCategory, SubscriptionRecord
from services.billing import days_until, is_overdue, monthly_amount, yearly_amount

DEFAULT_UPCOMING_WINDOW_DAYS = 7


class AnalyticsPeriod(str, Enum):
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class CategorySpending:
    """One row of the category breakdown."""
    category: SubscriptionCategory
    amount: Decimal
    percentage: Decimal
    count: int


def _monthly(record: SubscriptionRecord) -> Decimal:
    return monthly_amount(record.price, record.billing_cycle)


# ── Filtered views ────────────────────────────────────────

def active_records(records: Sequence[SubscriptionRecord]) -> list[SubscriptionRecord]:
    return [r for r in records if r.is_active]


def overdue_records(records: Sequence[SubscriptionRecord], today: date) -> list[SubscriptionRecord]:
    return [r for r in active_records(records) if is_overdue(r.next_billing_date, today)]


def upcoming_records(
    records: Sequence[SubscriptionRecord],
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> list[SubscriptionRecord]:
    """
    Active records due within ``window_days`` that are not overdue,
    soonest first. Records sharing a date keep their stored order.
    """
    due = [
        r for r in active_records(records)
        if days_until(r.next_billing_date, today) <= window_days
        and not is_overdue(r.next_billing_date, today)
    ]
    return sorted(due, key=lambda r: r.next_billing_date)


def upcoming_renewals_count(
    records: Sequence[SubscriptionRecord],
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> int:
    """Active records billed between today and today + window, both inclusive."""
    horizon = today + timedelta(days=window_days)
    return sum(1 for r in active_records(records) if today <= r.next_billing_date <= horizon)


def records_for_category(
    records: Sequence[SubscriptionRecord], category: SubscriptionCategory
) -> list[SubscriptionRecord]:
    return [r for r in active_records(records) if r.category is category]


def auto_renewing_records(records: Sequence[SubscriptionRecord]) -> list[SubscriptionRecord]:
    return [r for r in active_records(records) if r.auto_renews]


def records_without_auto_renewal(records: Sequence[SubscriptionRecord]) -> list[SubscriptionRecord]:
    return [r for r in active_records(records) if not r.auto_renews]


def search_records(
    records: Sequence[SubscriptionRecord],
    text: str = "",
    category: Optional[SubscriptionCategory] = None,
) -> list[SubscriptionRecord]:
    """
    Active records whose name contains ``text`` (case-insensitive),
    optionally limited to one category, sorted by name.
    """
    needle = text.strip().casefold()
    matches = active_records(records)
    if needle:
        matches = [r for r in matches if needle in r.name.casefold()]
    if category is not None:
        matches = [r for r in matches if r.category is category]
    return sorted(matches, key=lambda r: r.name)


# ── Sums ──────────────────────────────────────────────────

def total_monthly_spending(records: Sequence[SubscriptionRecord]) -> Decimal:
    return sum((_monthly(r) for r in active_records(records)), Decimal(0))


def total_yearly_spending(records: Sequence[SubscriptionRecord]) -> Decimal:
    return sum(
        (yearly_amount(r.price, r.billing_cycle) for r in active_records(records)),
        Decimal(0),
    )


def spending_by_category(
    records: Sequence[SubscriptionRecord], category: SubscriptionCategory
) -> Decimal:
    """Monthly spend for one category."""
    return sum((_monthly(r) for r in records_for_category(records, category)), Decimal(0))


def yearly_spending_by_category(
    records: Sequence[SubscriptionRecord], category: SubscriptionCategory
) -> Decimal:
    """
    Yearly spend for one category, derived as monthly x 12.

    Not recomputed with yearly_amount, so for non-monthly cycles it can
    differ slightly from the category's share of total_yearly_spending.
    """
    return spending_by_category(records, category) * 12


def category_breakdown(
    records: Sequence[SubscriptionRecord],
    period: AnalyticsPeriod = AnalyticsPeriod.MONTH,
) -> list[CategorySpending]:
    """
    Spend per category for categories with a non-zero amount, largest first.

    Percentages are relative to the period total (monthly or yearly);
    they are 0 when that total is 0.
    """
    if period is AnalyticsPeriod.YEAR:
        total = total_yearly_spending(records)
        amount_for = yearly_spending_by_category
    else:
        total = total_monthly_spending(records)
        amount_for = spending_by_category

    rows = []
    for category in SubscriptionCategory:
        amount = amount_for(records, category)
        if amount <= 0:
            continue
        percentage = amount / total * 100 if total > 0 else Decimal(0)
        rows.append(CategorySpending(
            category=category,
            amount=amount,
            percentage=percentage,
            count=len(records_for_category(records, category)),
        ))
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def average_monthly_cost(records: Sequence[SubscriptionRecord]) -> Decimal:
    active = active_records(records)
    return total_monthly_spending(records) / max(1, len(active))


# ── Statistics ────────────────────────────────────────────

def most_expensive(records: Sequence[SubscriptionRecord]) -> Optional[SubscriptionRecord]:
    """Highest monthly amount; the first one wins a tie. None when there are no active records."""
    active = active_records(records)
    if not active:
        return None
    return max(active, key=_monthly)


def cheapest(records: Sequence[SubscriptionRecord]) -> Optional[SubscriptionRecord]:
    """Lowest monthly amount; the first one wins a tie. None when there are no active records."""
    active = active_records(records)
    if not active:
        return None
    return min(active, key=_monthly)


def most_common_billing_cycle(records: Sequence[SubscriptionRecord]) -> Optional[BillingCycle]:
    """Mode of billing_cycle. On a tie the value seen first in store order wins."""
    counts = Counter(r.billing_cycle for r in active_records(records))
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def most_common_category(records: Sequence[SubscriptionRecord]) -> Optional[SubscriptionCategory]:
    """Mode of category. On a tie the value seen first in store order wins."""
    counts = Counter(r.category for r in active_records(records))
    if not counts:
        return None
    return counts.most_common(1)[0][0]
