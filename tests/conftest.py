from datetime import date
from decimal import Decimal

import pytest

from models.subscription import (
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionRecord,
)
from tests.fakes import FakeStorage

TODAY = date(2026, 3, 10)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_record():
    """Factory with sensible defaults; override any field by keyword."""
    def _make(name="Netflix", price="15.99", **overrides):
        fields = dict(
            name=name,
            price=Decimal(price),
            billing_cycle=BillingCycle.MONTHLY,
            category=SubscriptionCategory.STREAMING,
            next_billing_date=TODAY,
            repetition_type=RepetitionType.MONTHLY,
        )
        fields.update(overrides)
        return SubscriptionRecord(**fields)
    return _make


@pytest.fixture
def storage():
    return FakeStorage()
