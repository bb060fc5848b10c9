# =============================================================================
# capture_core/offline/record_store.py
# Durable Record Repository with Sync State
# =============================================================================
"""
RecordStore - the only component that reads or writes the records table.

Contract:
- upsert() assigns an id if missing, keeps created_at on re-save,
  always refreshes updated_at; new records start pending
- list_pending() is most-recent-first
- mark_synced() on an unknown id is a silent no-op
- every mutation notifies registered callbacks (pending-count refresh)
"""

from __future__ import annotations
import json
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
import logging

import pandas as pd

from .local_database import LocalDatabase
from .models import Record, SyncStatus

logger = logging.getLogger(__name__)


def generate_record_id() -> str:
    """Random UUID4 string."""
    return str(uuid.uuid4())


class RecordStore:
    """
    Usage:
        store = RecordStore(db)
        record = store.upsert({"firstName": "Ama", "lastName": "Mensah"})
        store.list_pending()
    """

    ID_KEY = "id"

    def __init__(
        self,
        db: LocalDatabase,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = generate_record_id,
    ):
        self._db = db
        self._clock = clock
        self._id_factory = id_factory
        self._callbacks: List[Callable[[], None]] = []

    def initialize(self) -> None:
        """Open the underlying database (idempotent)."""
        self._db.initialize()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def upsert(self, fields: Mapping[str, Any]) -> Record:
        """
        Persist a capture.

        Args:
            fields: field values; an "id" key, if present and truthy, selects the record

        Returns:
            The stored Record

        Raises:
            StorageError: on I/O failure (nothing is written)
            NotInitializedError: before initialize()
        """
        values: Dict[str, Any] = dict(fields)
        record_id = values.pop(self.ID_KEY, None) or self._id_factory()
        now = self._clock()

        with self._db.transaction("upsert") as conn:
            existing = conn.execute(
                "SELECT created_at, sync_status FROM records WHERE id = ?",
                [record_id],
            ).fetchone()

            if existing is None:
                created_at = now
                status = SyncStatus.PENDING
                conn.execute(
                    """
                    INSERT INTO records (id, fields_json, sync_status, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [record_id, json.dumps(values), status.value, created_at.isoformat(), now.isoformat()],
                )
            else:
                created_at = datetime.fromisoformat(existing["created_at"])
                status = SyncStatus(existing["sync_status"])
                conn.execute(
                    "UPDATE records SET fields_json = ?, updated_at = ? WHERE id = ?",
                    [json.dumps(values), now.isoformat(), record_id],
                )

        logger.debug(f"Saved record {record_id} ({status.value})")
        self._notify_callbacks()
        return Record(
            id=record_id,
            fields=values,
            sync_status=status,
            created_at=created_at,
            updated_at=now,
        )

    def mark_synced(self, record_id: str) -> bool:
        """Flag one record as synced. Unknown ids are ignored (returns False)."""
        changed = self._db.execute(
            "UPDATE records SET sync_status = ? WHERE id = ?",
            [SyncStatus.SYNCED.value, record_id],
        )
        if changed:
            self._notify_callbacks()
        else:
            logger.debug(f"mark_synced: no record {record_id}")
        return changed > 0

    def mark_synced_many(self, record_ids: Iterable[str]) -> int:
        """Flag several records as synced in one transaction; returns how many changed."""
        ids = list(record_ids)
        if not ids:
            return 0

        changed = 0
        with self._db.transaction("mark_synced") as conn:
            for record_id in ids:
                changed += conn.execute(
                    "UPDATE records SET sync_status = ? WHERE id = ?",
                    [SyncStatus.SYNCED.value, record_id],
                ).rowcount

        if changed != len(ids):
            logger.debug(f"mark_synced_many: {len(ids) - changed} ids unknown or repeated")
        self._notify_callbacks()
        return changed

    def remove(self, record_id: str) -> bool:
        """Permanently delete a record."""
        removed = self._db.execute("DELETE FROM records WHERE id = ?", [record_id])
        if removed:
            self._notify_callbacks()
        return removed > 0

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, record_id: str) -> Optional[Record]:
        rows = self._db.query("SELECT * FROM records WHERE id = ?", [record_id])
        return Record.from_row(rows[0]) if rows else None

    def list_pending(self) -> List[Record]:
        """Pending records, newest first."""
        rows = self._db.query(
            "SELECT * FROM records WHERE sync_status = ? ORDER BY created_at DESC, rowid DESC",
            [SyncStatus.PENDING.value],
        )
        return [Record.from_row(row) for row in rows]

    def list_all(self) -> List[Record]:
        """All records, newest first."""
        rows = self._db.query("SELECT * FROM records ORDER BY created_at DESC, rowid DESC")
        return [Record.from_row(row) for row in rows]

    def pending_count(self) -> int:
        rows = self._db.query(
            "SELECT COUNT(*) AS count FROM records WHERE sync_status = ?",
            [SyncStatus.PENDING.value],
        )
        return rows[0]["count"] if rows else 0

    def to_dataframe(self, pending_only: bool = False) -> pd.DataFrame:
        """
        One row per record: id, every field value as a column, sync_status,
        created_at, updated_at.
        """
        records = self.list_pending() if pending_only else self.list_all()
        rows = [
            {
                "id": r.id,
                **r.fields,
                "sync_status": r.sync_status.value,
                "created_at": r.created_at,
                "updated_at": r.updated_at,
            }
            for r in records
        ]
        columns = ["id", "sync_status", "created_at", "updated_at"]
        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(rows)

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after every successful mutation."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in record store callback: {e}")
