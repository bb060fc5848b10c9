# =============================================================================
# capture_core/offline/__init__.py
# Offline-First Capture and Sync
# =============================================================================
"""
Offline-First Capture Module

Captures are always written locally first; the sync coordinator pushes the
pending queue to the remote service whenever connectivity allows.

Architecture:
------------
    CaptureService (form submit)        SchemaResolver (form render)
              │                                  │
              ▼                                  ▼
        RecordStore ◄──── SyncCoordinator    SchemaCache
              │            │        │            │
              ▼            ▼        ▼            ▼
         ┌──────────┐  ConnectionMgr  RemoteServiceClient
         │  SQLite  │  (Online/Offline)   (POST /sync)
         │ (Local)  │
         └──────────┘

Usage:
------
from capture_core.offline import LocalDatabase, RecordStore, SyncCoordinator

db = LocalDatabase(path)
store = RecordStore(db)
store.initialize()
store.upsert({"firstName": "Ama"})

with SyncCoordinator(store, client, connection, db=db) as coordinator:
    print(coordinator.sync_now().message)
"""

from capture_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

from capture_core.offline.local_database import LocalDatabase

from capture_core.offline.models import Record, SyncStatus

from capture_core.offline.record_store import RecordStore, generate_record_id

from capture_core.offline.schema_cache import SchemaCache

from capture_core.offline.sync_engine import (
    SyncCoordinator,
    SyncOutcome,
    SyncOutcomeStatus,
    SyncState,
    CoordinatorPhase,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Local Database
    "LocalDatabase",
    # Records
    "Record",
    "SyncStatus",
    "RecordStore",
    "generate_record_id",
    # Schema Cache
    "SchemaCache",
    # Sync
    "SyncCoordinator",
    "SyncOutcome",
    "SyncOutcomeStatus",
    "SyncState",
    "CoordinatorPhase",
]
