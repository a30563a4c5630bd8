"""
services/renewal.py
-------------------
Renewal advancer: keeps next_billing_date current for active,
auto-renewing subscriptions that have become overdue.

Dates advance by calendar units (dateutil's relativedelta), so a
monthly subscription tracks month boundaries instead of 30-day blocks.
Steps are always measured from the original date (date + n cycles),
which keeps a subscription billed on the 31st from drifting to the 28th
after passing through February.
"""

from dataclasses import replace
from datetime import date
from typing import Iterable

from dateutil.relativedelta import relativedelta

from models.subscription import RepetitionType, SubscriptionRecord
from services.billing import is_overdue
from utils.logger import get_logger

logger = get_logger(__name__)

RENEWAL_STEPS: dict[RepetitionType, relativedelta] = {
    RepetitionType.WEEKLY: relativedelta(weeks=1),
    RepetitionType.MONTHLY: relativedelta(months=1),
    RepetitionType.QUARTERLY: relativedelta(months=3),
    RepetitionType.YEARLY: relativedelta(years=1),
}


def next_renewal_date(start: date, repetition_type: RepetitionType, today: date) -> date:
    """
    Return the first date of the form ``start + n * cycle`` (n >= 0) that is not before today.

    Args:
        start: The current (possibly overdue) billing date.
        repetition_type: Renewal cadence; must not be DISABLED.
        today: Reference date.

    Raises:
        ValueError: If repetition_type is DISABLED.
    """
    if repetition_type is RepetitionType.DISABLED:
        raise ValueError("Disabled renewals never advance.")

    step = RENEWAL_STEPS[repetition_type]
    cycles = 0
    candidate = start
    while is_overdue(candidate, today):
        cycles += 1
        candidate = start + step * cycles
    return candidate


def should_advance(record: SubscriptionRecord, today: date) -> bool:
    """Only active, auto-renewing, overdue records are advanced."""
    return (
        record.is_active
        and record.auto_renews
        and is_overdue(record.next_billing_date, today)
    )


def advance_record(record: SubscriptionRecord, today: date) -> SubscriptionRecord:
    """
    Catch a single record up to today.

    Returns:
        A copy with the new next_billing_date, or the same object when nothing changes.
    """
    if not should_advance(record, today):
        return record
    new_date = next_renewal_date(record.next_billing_date, record.repetition_type, today)
    logger.info(
        f"Advanced '{record.name}' ({record.repetition_type.value}) "
        f"from {record.next_billing_date} to {new_date}"
    )
    return replace(record, next_billing_date=new_date)


def process_auto_renewals(
    records: Iterable[SubscriptionRecord], today: date
) -> tuple[list[SubscriptionRecord], int]:
    """
    Run one renewal pass over a record set.

    Order is preserved. Running the pass again with the same ``today``
    changes nothing.

    Returns:
        (records after the pass, number of records that changed)
    """
    result: list[SubscriptionRecord] = []
    changed = 0
    for record in records:
        advanced = advance_record(record, today)
        if advanced is not record:
            changed += 1
        result.append(advanced)
    return result, changed
