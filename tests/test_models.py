from dataclasses import FrozenInstanceError, replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from models.category import CATEGORY_STYLES, style_for
from models.subscription import (
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionRecord,
    SubscriptionValidationError,
)


def test_valid_record_defaults(make_record):
    record = make_record()
    assert record.is_active is True
    assert record.notes == ""
    assert record.color == "blue"
    assert record.id is None
    assert record.auto_renews


def test_zero_price_is_allowed(make_record):
    assert make_record(price="0").price == Decimal("0")


@pytest.mark.parametrize("name", ["", "   "])
def test_empty_name_is_rejected(make_record, name):
    with pytest.raises(SubscriptionValidationError):
        make_record(name=name)


def test_negative_price_is_rejected(make_record):
    with pytest.raises(SubscriptionValidationError):
        make_record(price="-1")


def test_float_price_is_rejected():
    with pytest.raises(SubscriptionValidationError):
        SubscriptionRecord(
            name="Gym",
            price=1.5,
            billing_cycle=BillingCycle.MONTHLY,
            category=SubscriptionCategory.FITNESS,
            next_billing_date=date(2026, 1, 1),
        )


def test_datetime_is_not_a_billing_date(make_record):
    with pytest.raises(SubscriptionValidationError):
        make_record(next_billing_date=datetime(2026, 3, 10, 12, 0))


def test_raw_strings_are_not_enums(make_record):
    with pytest.raises(SubscriptionValidationError):
        make_record(billing_cycle="monthly")
    with pytest.raises(SubscriptionValidationError):
        make_record(category="streaming")
    with pytest.raises(SubscriptionValidationError):
        make_record(repetition_type="yearly")


def test_replace_revalidates(make_record):
    record = make_record()
    with pytest.raises(SubscriptionValidationError):
        replace(record, price=Decimal("-5"))


def test_records_are_immutable(make_record):
    record = make_record()
    with pytest.raises(FrozenInstanceError):
        record.price = Decimal("1")


def test_disabled_repetition_does_not_auto_renew(make_record):
    assert not make_record(repetition_type=RepetitionType.DISABLED).auto_renews


def test_every_category_has_a_style():
    assert set(CATEGORY_STYLES) == set(SubscriptionCategory)
    assert style_for(SubscriptionCategory.MUSIC).label == "Music"
