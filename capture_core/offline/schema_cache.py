# =============================================================================
# capture_core/offline/schema_cache.py
# Single-slot Cache of the Last Fetched Schema
# =============================================================================

from __future__ import annotations
import json
from datetime import datetime
from typing import Any, Callable, Iterable, Optional
import logging

from capture_core.errors import SchemaFormatError, StorageError
from capture_core.schema.fields import FieldDefinition, Schema, parse_elements
from .local_database import LocalDatabase

logger = logging.getLogger(__name__)


class SchemaCache:
    """
    Holds at most one schema. put() replaces whatever was there.

    Usage:
        cache = SchemaCache(db)
        cache.put(schema.version, schema.fields)
        cache.get()  # -> Schema | None
    """

    def __init__(self, db: LocalDatabase, clock: Callable[[], datetime] = datetime.now):
        self._db = db
        self._clock = clock

    def put(self, version: Optional[int], elements: Iterable[Any]) -> None:
        """Replace the cached schema (delete-then-insert in one transaction)."""
        serialized = json.dumps([
            e.to_dict() if isinstance(e, FieldDefinition) else e
            for e in elements
        ])

        with self._db.transaction("cache_schema") as conn:
            conn.execute("DELETE FROM schema_cache")
            conn.execute(
                "INSERT INTO schema_cache (version, elements, cached_at) VALUES (?, ?, ?)",
                [version, serialized, self._clock().isoformat()],
            )
        logger.debug(f"Cached schema v{version}")

    def get(self) -> Optional[Schema]:
        """
        Return the cached schema, or None when the slot is empty.

        Raises:
            StorageError: unreadable row or I/O failure
        """
        rows = self._db.query("SELECT * FROM schema_cache ORDER BY id DESC LIMIT 1")
        if not rows:
            return None

        row = rows[0]
        try:
            fields = parse_elements(json.loads(row["elements"]))
        except (json.JSONDecodeError, SchemaFormatError) as e:
            raise StorageError(f"Cached schema is unreadable: {e}", operation="read_schema_cache") from e
        return Schema(version=row["version"], fields=fields)

    def cached_at(self) -> Optional[datetime]:
        rows = self._db.query("SELECT cached_at FROM schema_cache ORDER BY id DESC LIMIT 1")
        return datetime.fromisoformat(rows[0]["cached_at"]) if rows else None

    def clear(self) -> None:
        self._db.execute("DELETE FROM schema_cache")
