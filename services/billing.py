"""
services/billing.py
-------------------
Billing calculator: converts a price quoted per billing cycle into
normalized monthly and yearly amounts, and measures the distance to
the next billing date.

All functions are pure. "today" is always passed in by the caller.
"""

from datetime import date
from decimal import Decimal

from models.subscription import BillingCycle

# Number of charges per year for each cycle.
_CHARGES_PER_YEAR: dict[BillingCycle, int] = {
    BillingCycle.WEEKLY: 52,
    BillingCycle.MONTHLY: 12,
    BillingCycle.QUARTERLY: 4,
    BillingCycle.YEARLY: 1,
}


def monthly_amount(price: Decimal, billing_cycle: BillingCycle) -> Decimal:
    """
    Normalize a price to a monthly figure.

    Weekly is x52/12, monthly x1, quarterly /3, yearly /12.
    """
    if billing_cycle is BillingCycle.WEEKLY:
        return price * 52 / 12
    if billing_cycle is BillingCycle.QUARTERLY:
        return price / 3
    if billing_cycle is BillingCycle.YEARLY:
        return price / 12
    return price


def yearly_amount(price: Decimal, billing_cycle: BillingCycle) -> Decimal:
    """Normalize a price to a yearly figure (weekly x52, monthly x12, quarterly x4)."""
    return price * _CHARGES_PER_YEAR[billing_cycle]


def days_until(next_billing_date: date, today: date) -> int:
    """Whole calendar days from today to the billing date. Negative when overdue."""
    return (next_billing_date - today).days


def is_overdue(next_billing_date: date, today: date) -> bool:
    """True iff the billing date is strictly before today."""
    return next_billing_date < today
