"""
repositories/subscription_storage.py
------------------------------------
Persistence collaborator for the subscription store.

The whole record set is saved under a single key, the way a mobile app
keeps it in its preferences: one JSONB value in the key_value_store
table. The codec here is lossless, so decode_records(encode_records(r))
equals r field for field.
"""

import json
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol, Sequence

import psycopg2
from psycopg2 import extras

from db.connection import get_connection, release_connection
from models.subscription import (
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionRecord,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class StorageError(RuntimeError):
    """Raised when the record set cannot be read or written."""


class SubscriptionStorage(Protocol):
    """What the store needs from a persistence backend."""

    def load(self) -> Optional[list[SubscriptionRecord]]:
        """Return the saved records, or None if nothing was ever saved."""
        ...

    def save(self, records: Sequence[SubscriptionRecord]) -> None:
        ...


# ── CODEC ─────────────────────────────────────────────────

def record_to_dict(record: SubscriptionRecord) -> dict[str, Any]:
    """Convert a record to a JSON-compatible dict."""
    return {
        "id": record.id,
        "name": record.name,
        "price": str(record.price),
        "billing_cycle": record.billing_cycle.value,
        "category": record.category.value,
        "next_billing_date": record.next_billing_date.isoformat(),
        "is_active": record.is_active,
        "notes": record.notes,
        "color": record.color,
        "repetition_type": record.repetition_type.value,
    }


def dict_to_record(data: dict[str, Any]) -> SubscriptionRecord:
    """
    Rebuild a record from its dict form.

    Raises:
        StorageError: If a field is missing or malformed.
    """
    try:
        return SubscriptionRecord(
            id=data["id"],
            name=data["name"],
            price=Decimal(data["price"]),
            billing_cycle=BillingCycle(data["billing_cycle"]),
            category=SubscriptionCategory(data["category"]),
            next_billing_date=date.fromisoformat(data["next_billing_date"]),
            is_active=bool(data["is_active"]),
            notes=data.get("notes", ""),
            color=data.get("color", "blue"),
            repetition_type=RepetitionType(data["repetition_type"]),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        # invalid field values surface as SubscriptionValidationError, a ValueError
        raise StorageError(f"Corrupt subscription entry {data!r}: {e}") from e


def encode_records(records: Sequence[SubscriptionRecord]) -> list[dict[str, Any]]:
    return [record_to_dict(r) for r in records]


def decode_records(payload: Any) -> list[SubscriptionRecord]:
    """
    Decode a stored payload (a list, or its JSON text).

    Raises:
        StorageError: If the payload is not a list of valid entries.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored subscriptions are not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise StorageError(f"Expected a list of subscriptions, got {type(payload).__name__}.")
    return [dict_to_record(item) for item in payload]


# ── POSTGRES BACKEND ──────────────────────────────────────

class PostgresKeyValueStorage:
    """Stores the encoded record set as one JSONB value keyed by ``key``."""

    def __init__(self, key: str):
        self.key = key

    def load(self) -> Optional[list[SubscriptionRecord]]:
        """
        Read the record set.

        Returns:
            The decoded records, or None when the key has never been written.

        Raises:
            StorageError: On database failure (including an unreachable
                database) or undecodable data.
        """
        sql = "SELECT value FROM key_value_store WHERE key = %s;"
        conn = None
        try:
            conn = get_connection()
            with conn.cursor() as cur:
                cur.execute(sql, (self.key,))
                row = cur.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Failed to load '{self.key}': {e}")
            raise StorageError(f"Could not load '{self.key}'") from e
        finally:
            if conn is not None:
                release_connection(conn)

        if row is None:
            return None
        records = decode_records(row[0])
        logger.info(f"Loaded {len(records)} subscriptions from '{self.key}'")
        return records

    def save(self, records: Sequence[SubscriptionRecord]) -> None:
        """
        Upsert the full record set.

        Raises:
            StorageError: On database failure, including an unreachable
                database or a connection that dropped mid-write.
        """
        sql = """
            INSERT INTO key_value_store (key, value)
            VALUES (%s, %s)
            ON CONFLICT (key)
            DO UPDATE SET value = EXCLUDED.value, updated_at = NOW();
        """
        conn = None
        try:
            conn = get_connection()
            with conn.cursor() as cur:
                cur.execute(sql, (self.key, extras.Json(encode_records(records))))
            conn.commit()
            logger.info(f"Saved {len(records)} subscriptions to '{self.key}'")
        except psycopg2.Error as e:
            logger.error(f"Failed to save '{self.key}': {e}")
            if conn is not None:
                self._rollback(conn)
            raise StorageError(f"Could not save '{self.key}'") from e
        finally:
            if conn is not None:
                release_connection(conn)

    def _rollback(self, conn) -> None:
        try:
            conn.rollback()
        except psycopg2.Error as e:
            # connection already closed
            logger.error(f"Rollback of '{self.key}' failed: {e}")
