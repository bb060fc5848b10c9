# =============================================================================
# capture_core/offline/models.py
# Local Record Types
# =============================================================================

from __future__ import annotations
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class SyncStatus(str, Enum):
    """Synchronization state of a stored record."""
    PENDING = "pending"
    SYNCED = "synced"


@dataclass
class Record:
    """One captured entity as kept in the local store."""
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    sync_status: SyncStatus = SyncStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_pending(self) -> bool:
        return self.sync_status is SyncStatus.PENDING

    def to_wire(self) -> Dict[str, Any]:
        """Flattened shape posted to /sync: {id, <fields>, syncStatus, createdAt, updatedAt}."""
        payload = dict(self.fields)
        payload.update({
            "id": self.id,
            "syncStatus": self.sync_status.value,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        })
        return payload

    @classmethod
    def from_row(cls, row) -> Record:
        """Build from a sqlite3.Row of the records table."""
        return cls(
            id=row["id"],
            fields=json.loads(row["fields_json"]) if row["fields_json"] else {},
            sync_status=SyncStatus(row["sync_status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
