"""
repositories/subscription_store.py
----------------------------------
The record store: sole owner of the canonical, insertion-ordered list of
subscriptions.

Responsibilities:
    - CRUD on records, matched by id.
    - Running the renewal advancer on load and on demand.
    - Persisting the full set through a storage collaborator after every change.
    - Notifying listeners with a read-only snapshot after every change.

Storage failures never escape: a failed load starts from an empty set and
a failed save leaves the in-memory state authoritative for the session.
"""

import uuid
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from models.subscription import (
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionRecord,
)
from repositories.subscription_storage import StorageError, SubscriptionStorage
from services.renewal import process_auto_renewals
from utils.logger import get_logger

logger = get_logger(__name__)

StoreListener = Callable[[tuple[SubscriptionRecord, ...]], None]


def sample_records(today: date) -> list[SubscriptionRecord]:
    """Example subscriptions shown on first run."""
    return [
        SubscriptionRecord(
            name="Netflix",
            price=Decimal("15.99"),
            billing_cycle=BillingCycle.MONTHLY,
            category=SubscriptionCategory.STREAMING,
            next_billing_date=today + timedelta(days=5),
            color="red",
            repetition_type=RepetitionType.MONTHLY,
        ),
        SubscriptionRecord(
            name="Spotify",
            price=Decimal("9.99"),
            billing_cycle=BillingCycle.MONTHLY,
            category=SubscriptionCategory.MUSIC,
            next_billing_date=today + timedelta(days=12),
            color="green",
            repetition_type=RepetitionType.MONTHLY,
        ),
        SubscriptionRecord(
            name="Adobe Creative Cloud",
            price=Decimal("52.99"),
            billing_cycle=BillingCycle.MONTHLY,
            category=SubscriptionCategory.PRODUCTIVITY,
            next_billing_date=today + timedelta(days=3),
            color="purple",
            repetition_type=RepetitionType.YEARLY,
        ),
    ]


class SubscriptionStore:
    """
    In-memory subscription collection backed by a storage collaborator.

    Args:
        storage: Object with ``load()`` and ``save(records)``.
        seed_sample_data: Seed example records when storage has never been written.
    """

    def __init__(self, storage: SubscriptionStorage, seed_sample_data: bool = False):
        self.storage = storage
        self.seed_sample_data = seed_sample_data
        self.last_save_error: Optional[StorageError] = None
        self._records: list[SubscriptionRecord] = []
        self._listeners: list[StoreListener] = []

    # ── READ ──────────────────────────────────────────────

    @property
    def records(self) -> tuple[SubscriptionRecord, ...]:
        """Snapshot of all records in insertion order."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: str) -> Optional[SubscriptionRecord]:
        """Fetch a record by exact id."""
        index = self._index_of(record_id)
        return self._records[index] if index is not None else None

    def find(self, id_prefix: str) -> Optional[SubscriptionRecord]:
        """
        Fetch a record by id or unambiguous id prefix.

        Returns:
            The record, or None when nothing or more than one record matches.
        """
        prefix = id_prefix.strip().lower()
        if not prefix:
            return None
        exact = [r for r in self._records if r.id.lower() == prefix]
        if exact:
            return exact[0]
        matches = [r for r in self._records if r.id.lower().startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    # ── LISTENERS ─────────────────────────────────────────

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── LOAD ──────────────────────────────────────────────

    def load(self, today: date) -> tuple[SubscriptionRecord, ...]:
        """
        Replace the in-memory set with the persisted one, then run a renewal pass.

        Missing or corrupt data yields an empty set. On the very first run
        (nothing ever saved) sample records are seeded if enabled.
        """
        try:
            loaded = self.storage.load()
        except StorageError as e:
            logger.warning(f"Could not load subscriptions, starting empty: {e}")
            loaded = []

        if loaded is None:
            self._records = []
            if self.seed_sample_data:
                self._records = [self._with_id(r) for r in sample_records(today)]
                logger.info(f"Seeded {len(self._records)} sample subscriptions")
                self._persist()
        else:
            self._records = self._deduplicate(loaded)

        self._notify()
        self.process_auto_renewals(today)
        return self.records

    # ── CREATE / UPDATE / DELETE ──────────────────────────

    def add(self, record: SubscriptionRecord) -> SubscriptionRecord:
        """
        Append a record, assigning an id when it has none.

        Returns:
            The stored record (with its id).
        """
        stored = self._with_id(record)
        if self._index_of(stored.id) is not None:
            # ids must stay unique across the live set
            stored = replace(stored, id=self._new_id())
        self._records.append(stored)
        logger.info(f"Added subscription '{stored.name}' ({stored.id})")
        self._commit()
        return stored

    def update(self, record: SubscriptionRecord) -> bool:
        """Replace the record with the same id. Unknown ids are ignored."""
        index = self._index_of(record.id)
        if index is None:
            logger.warning(f"Update ignored, no subscription with id {record.id}")
            return False
        self._records[index] = record
        logger.info(f"Updated subscription '{record.name}' ({record.id})")
        self._commit()
        return True

    def delete(self, record: SubscriptionRecord) -> bool:
        """Remove the record with the same id. Unknown ids are ignored."""
        index = self._index_of(record.id)
        if index is None:
            logger.warning(f"Delete ignored, no subscription with id {record.id}")
            return False
        removed = self._records.pop(index)
        logger.info(f"Deleted subscription '{removed.name}' ({removed.id})")
        self._commit()
        return True

    def toggle_active(self, record: SubscriptionRecord) -> Optional[SubscriptionRecord]:
        """
        Flip is_active on the record with the same id.

        Returns:
            The updated record, or None when the id is unknown.
        """
        index = self._index_of(record.id)
        if index is None:
            logger.warning(f"Toggle ignored, no subscription with id {record.id}")
            return None
        current = self._records[index]
        toggled = replace(current, is_active=not current.is_active)
        self._records[index] = toggled
        logger.info(f"Subscription '{toggled.name}' is now {'active' if toggled.is_active else 'paused'}")
        self._commit()
        return toggled

    # ── RENEWALS ──────────────────────────────────────────

    def process_auto_renewals(self, today: date) -> int:
        """
        Advance every overdue auto-renewing record past ``today``.
        Changes are persisted once for the whole pass.

        Returns:
            Number of records whose next billing date moved.
        """
        advanced, changed = process_auto_renewals(self._records, today)
        if changed:
            self._records = advanced
            logger.info(f"Renewal pass advanced {changed} subscription(s)")
            self._commit()
        return changed

    # ── HELPERS ───────────────────────────────────────────

    def _index_of(self, record_id: Optional[str]) -> Optional[int]:
        if record_id is None:
            return None
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def _with_id(self, record: SubscriptionRecord) -> SubscriptionRecord:
        return record if record.id else replace(record, id=self._new_id())

    def _deduplicate(self, records: list[SubscriptionRecord]) -> list[SubscriptionRecord]:
        """Give fresh ids to records loaded without one or with a duplicate id."""
        seen: set[str] = set()
        result = []
        for record in records:
            if not record.id or record.id in seen:
                logger.warning(f"Reassigning id of loaded subscription '{record.name}'")
                record = replace(record, id=self._new_id())
            seen.add(record.id)
            result.append(record)
        return result

    def _commit(self) -> None:
        self._persist()
        self._notify()

    def _persist(self) -> None:
        try:
            self.storage.save(self.records)
            self.last_save_error = None
        except StorageError as e:
            self.last_save_error = e
            logger.error(f"Failed to save subscriptions, keeping in-memory state: {e}")

    def _notify(self) -> None:
        snapshot = self.records
        for listener in list(self._listeners):
            listener(snapshot)
