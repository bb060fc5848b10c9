# =============================================================================
# capture_core/offline/local_database.py
# Local SQLite Database for Offline Operations
# =============================================================================
"""
LocalDatabase - the device-local persistence layer.

Features:
- Explicit initialize()/dispose() lifecycle (no module-level connection)
- Automatic schema creation
- Transactions that either commit fully or leave nothing behind
- Key/value app settings
- DataFrame reads (pandas)

All sqlite3 failures surface as StorageError; any use before initialize()
raises NotInitializedError.
"""

from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union
import logging

import pandas as pd

from capture_core.errors import NotInitializedError, StorageError

logger = logging.getLogger(__name__)


class LocalDatabase:
    """
    Local SQLite database owning the records, schema cache and settings tables.

    Usage:
        db = LocalDatabase(Path("local_data/capture.db"))
        db.initialize()
        ...
        db.dispose()
    """

    DEFAULT_DB_PATH = Path("local_data") / "capture.db"

    SCHEMA = {
        "records": """
            CREATE TABLE IF NOT EXISTS records (
                id TEXT PRIMARY KEY,
                fields_json TEXT NOT NULL,
                sync_status TEXT NOT NULL DEFAULT 'pending',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """,
        "records_sync_status_idx": """
            CREATE INDEX IF NOT EXISTS idx_records_sync_status
            ON records(sync_status, created_at DESC)
        """,
        "schema_cache": """
            CREATE TABLE IF NOT EXISTS schema_cache (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                version INTEGER,
                elements TEXT NOT NULL,
                cached_at TEXT NOT NULL
            )
        """,
        "app_settings": """
            CREATE TABLE IF NOT EXISTS app_settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """,
    }

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path if db_path is not None else self.DEFAULT_DB_PATH
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._connection is not None

    def _ensure_directory(self) -> None:
        if str(self.db_path) != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def initialize(self) -> sqlite3.Connection:
        """
        Open the database and create tables.

        Idempotent: a second call returns the existing connection.
        """
        with self._lock:
            if self._connection is not None:
                return self._connection

            try:
                self._ensure_directory()
                connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
                connection.row_factory = sqlite3.Row
                for table_name, ddl in self.SCHEMA.items():
                    connection.execute(ddl)
                    logger.debug(f"Created/verified: {table_name}")
                connection.commit()
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Cannot open local database at {self.db_path}: {e}", operation="initialize")

            self._connection = connection
            logger.info(f"Local database initialized at: {self.db_path}")
            return connection

    def dispose(self) -> None:
        """Close the connection. Later operations raise NotInitializedError."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info("Local database closed")

    def __enter__(self) -> LocalDatabase:
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.dispose()
        return False

    def _get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise NotInitializedError()
        return self._connection

    @contextmanager
    def transaction(self, operation: str = "write") -> Iterator[sqlite3.Connection]:
        """Commit on success; roll back and raise StorageError on sqlite failure."""
        with self._lock:
            conn = self._get_connection()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Local database {operation} failed: {e}")
                raise StorageError(str(e), operation=operation) from e
            except BaseException:
                conn.rollback()
                raise

    def query(self, sql: str, params: Optional[List] = None) -> List[sqlite3.Row]:
        """Execute a read query."""
        with self._lock:
            conn = self._get_connection()
            try:
                return conn.execute(sql, params or []).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Local database read failed: {e}")
                raise StorageError(str(e), operation="read") from e

    def execute(self, sql: str, params: Optional[List] = None) -> int:
        """Execute a single write statement; returns the affected row count."""
        with self.transaction() as conn:
            return conn.execute(sql, params or []).rowcount

    # =========================================================================
    # PANDAS INTEGRATION
    # =========================================================================

    def to_dataframe(self, sql: str, params: Optional[List] = None) -> pd.DataFrame:
        """Run a read query into a DataFrame."""
        with self._lock:
            conn = self._get_connection()
            try:
                return pd.read_sql_query(sql, conn, params=params)
            except (sqlite3.Error, pd.errors.DatabaseError) as e:
                raise StorageError(str(e), operation="read") from e

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an app setting."""
        result = self.query("SELECT value FROM app_settings WHERE key = ?", [key])
        if result:
            try:
                return json.loads(result[0]["value"])
            except (json.JSONDecodeError, TypeError):
                return result[0]["value"]
        return default

    def set_setting(self, key: str, value: Any) -> None:
        """Set an app setting (JSON-encoded)."""
        self.execute(
            """
            INSERT OR REPLACE INTO app_settings (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            [key, json.dumps(value), datetime.now().isoformat()]
        )

    def delete_setting(self, key: str) -> None:
        self.execute("DELETE FROM app_settings WHERE key = ?", [key])
