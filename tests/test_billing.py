from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.subscription import BillingCycle
from services.billing import days_until, is_overdue, monthly_amount, yearly_amount


@pytest.mark.parametrize("price, cycle, expected", [
    ("12", BillingCycle.WEEKLY, "52"),
    ("15.99", BillingCycle.MONTHLY, "15.99"),
    ("30", BillingCycle.QUARTERLY, "10"),
    ("120", BillingCycle.YEARLY, "10"),
])
def test_monthly_amount(price, cycle, expected):
    assert monthly_amount(Decimal(price), cycle) == Decimal(expected)


@pytest.mark.parametrize("price, cycle, expected", [
    ("1", BillingCycle.WEEKLY, "52"),
    ("15.99", BillingCycle.MONTHLY, "191.88"),
    ("10", BillingCycle.QUARTERLY, "40"),
    ("99", BillingCycle.YEARLY, "99"),
])
def test_yearly_amount(price, cycle, expected):
    assert yearly_amount(Decimal(price), cycle) == Decimal(expected)


def test_weekly_monthly_amount_uses_52_weeks_over_12_months():
    assert monthly_amount(Decimal("3"), BillingCycle.WEEKLY) == Decimal("13")


def test_days_until(today):
    assert days_until(today + timedelta(days=5), today) == 5
    assert days_until(today, today) == 0
    assert days_until(today - timedelta(days=3), today) == -3


def test_days_until_crosses_year_boundary():
    assert days_until(date(2027, 1, 2), date(2026, 12, 30)) == 3


def test_is_overdue_is_strict(today):
    assert not is_overdue(today, today)
    assert not is_overdue(today + timedelta(days=1), today)
    assert is_overdue(today - timedelta(days=1), today)
