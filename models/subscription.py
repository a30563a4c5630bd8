"""
models/subscription.py
----------------------
Domain model for tracked subscriptions and the enums that describe
how they are billed and renewed.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class SubscriptionValidationError(ValueError):
    """Raised when subscription fields are missing or out of range."""


class BillingCycle(str, Enum):
    """The nominal period a subscription's price covers."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RepetitionType(str, Enum):
    """Auto-renewal cadence used to advance the next billing date."""
    DISABLED = "disabled"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class SubscriptionCategory(str, Enum):
    """Closed set of grouping tags."""
    STREAMING = "streaming"
    MUSIC = "music"
    PRODUCTIVITY = "productivity"
    GAMING = "gaming"
    NEWS = "news"
    FITNESS = "fitness"
    EDUCATION = "education"
    CLOUD = "cloud"
    UTILITIES = "utilities"
    OTHER = "other"


COLORS = ("blue", "red", "green", "orange", "purple", "pink", "yellow", "indigo", "teal", "mint")


@dataclass(frozen=True)
class SubscriptionRecord:
    """
    A recurring payment obligation.

    Attributes:
        name: Display name, never empty.
        price: Amount charged per billing cycle (not normalized).
        billing_cycle: Period the price covers.
        category: Grouping tag.
        next_billing_date: Next date a charge is expected.
        is_active: Inactive records stay stored but are ignored by aggregates and renewals.
        notes: Free text.
        color: Display tag, opaque to the engine.
        repetition_type: How next_billing_date auto-advances. Independent of billing_cycle.
        id: Stable identifier, assigned by the store when None.
    """
    name: str
    price: Decimal
    billing_cycle: BillingCycle
    category: SubscriptionCategory
    next_billing_date: date
    is_active: bool = True
    notes: str = ""
    color: str = "blue"
    repetition_type: RepetitionType = RepetitionType.MONTHLY
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SubscriptionValidationError("Subscription name must not be empty.")
        if not isinstance(self.price, Decimal) or not self.price.is_finite():
            raise SubscriptionValidationError(f"Price must be a finite Decimal, got {self.price!r}.")
        if self.price < 0:
            raise SubscriptionValidationError(f"Price must not be negative, got {self.price}.")
        # datetime is a date subclass but carries a time of day
        if not isinstance(self.next_billing_date, date) or isinstance(self.next_billing_date, datetime):
            raise SubscriptionValidationError("next_billing_date must be a calendar date.")
        if not isinstance(self.billing_cycle, BillingCycle):
            raise SubscriptionValidationError(f"Unknown billing cycle: {self.billing_cycle!r}.")
        if not isinstance(self.category, SubscriptionCategory):
            raise SubscriptionValidationError(f"Unknown category: {self.category!r}.")
        if not isinstance(self.repetition_type, RepetitionType):
            raise SubscriptionValidationError(f"Unknown repetition type: {self.repetition_type!r}.")

    @property
    def auto_renews(self) -> bool:
        return self.repetition_type is not RepetitionType.DISABLED

    def __str__(self) -> str:
        status = "✅" if self.is_active else "⏸️"
        return (
            f"{status} {self.name}: {self.price:.2f} ({self.billing_cycle.value}) "
            f"- Next: {self.next_billing_date.isoformat()}"
        )
