# =============================================================================
# capture_core/offline/sync_engine.py
# Pending-queue Reconciliation with the Remote Service
# =============================================================================
"""
SyncCoordinator - pushes pending records to POST /sync and applies the
per-record result.

State machine:
    Idle --sync_now()--> Syncing --(any result)--> Idle

- sync_now() while Syncing returns ALREADY_IN_PROGRESS, no network I/O
- sync_now() while offline returns OFFLINE, no network I/O
- empty queue returns NOTHING_TO_SYNC without a network call
- ids in the response's success list become synced in one transaction;
  everything else stays pending and is retried on the next trigger
- transport/server failure leaves every record pending

The Idle->Syncing check-and-set happens under a lock before any I/O, so two
triggers can never both get past it. A reconnect (not-online -> online) seen
while Idle with pending records schedules one debounced sync; rescheduling
cancels the previous timer.
"""

from __future__ import annotations
import threading
from functools import partial
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from capture_core.errors import CaptureError, ErrorContext, RemoteError, error_boundary
from capture_core.logging import LogContext
from .connection_manager import ConnectionManager, ConnectionState, ConnectionStatus
from .local_database import LocalDatabase
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class CoordinatorPhase(Enum):
    IDLE = "idle"
    SYNCING = "syncing"


class SyncOutcomeStatus(Enum):
    """Result of one sync_now() call."""
    COMPLETED = "completed"
    NOTHING_TO_SYNC = "nothing_to_sync"
    ALREADY_IN_PROGRESS = "already_in_progress"
    OFFLINE = "offline"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """What a sync trigger did. Returned instead of raising."""
    status: SyncOutcomeStatus
    message: str
    total: int = 0
    successful: int = 0
    synced_ids: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[CaptureError] = None

    @property
    def success(self) -> bool:
        return self.status in (SyncOutcomeStatus.COMPLETED, SyncOutcomeStatus.NOTHING_TO_SYNC)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "success": self.success,
            "message": self.message,
            "total": self.total,
            "successful": self.successful,
            "synced_ids": list(self.synced_ids),
            "failed": list(self.failed),
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class SyncState:
    """Current coordinator state."""
    phase: CoordinatorPhase = CoordinatorPhase.IDLE
    connectivity: ConnectionStatus = ConnectionStatus.UNKNOWN
    pending_count: int = 0
    last_sync_attempt: Optional[datetime] = None
    last_outcome: Optional[SyncOutcomeStatus] = None
    total_synced: int = 0


class SyncCoordinator:
    """
    Usage:
        coordinator = SyncCoordinator(store, client, connection, db=db)
        with coordinator:              # subscribes to connectivity + store changes
            outcome = coordinator.sync_now()
            print(outcome.message)
    """

    SYNC_DEBOUNCE_SECONDS = 0.5
    LAST_SYNC_SETTING = "last_sync_attempt"

    def __init__(
        self,
        store: RecordStore,
        client,
        connection: ConnectionManager,
        db: Optional[LocalDatabase] = None,
        debounce_seconds: float = SYNC_DEBOUNCE_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        """
        Args:
            store: record repository
            client: object with submit_records(records) -> SyncResponse
            connection: source of last-known connectivity and change events
            db: where the last sync attempt is persisted (optional)
            debounce_seconds: delay between reconnect and automatic sync
            clock: wall clock
            timer_factory: threading.Timer-compatible factory
        """
        self._store = store
        self._client = client
        self._connection = connection
        self._db = db
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._timer_factory = timer_factory

        self._state = SyncState()
        self._lock = threading.Lock()
        self._timer = None
        self._timer_generation = 0
        self._started = False
        self._callbacks: List[Callable[[SyncState], None]] = []

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SyncState:
        return replace(self._state)

    @property
    def is_syncing(self) -> bool:
        return self._state.phase is CoordinatorPhase.SYNCING

    @property
    def pending_count(self) -> int:
        return self._state.pending_count

    @property
    def has_scheduled_sync(self) -> bool:
        return self._timer is not None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Subscribe to connectivity and store changes."""
        if self._started:
            return

        self._state.connectivity = self._connection.status
        self._connection.register_callback(self._on_connection_change)
        self._store.register_callback(self.refresh_pending_count)
        self._started = True
        self.refresh_pending_count()

        if self._db is not None:
            with ErrorContext("Loading last sync attempt"):
                stored = self._db.get_setting(self.LAST_SYNC_SETTING)
                if stored:
                    self._state.last_sync_attempt = datetime.fromisoformat(stored)

        logger.info(f"Sync coordinator started ({self._state.pending_count} pending)")

    def stop(self) -> None:
        """Cancel any scheduled sync and release both subscriptions."""
        self._cancel_scheduled_sync()
        self._connection.unregister_callback(self._on_connection_change)
        self._store.unregister_callback(self.refresh_pending_count)
        if self._started:
            logger.info("Sync coordinator stopped")
        self._started = False

    def __enter__(self) -> SyncCoordinator:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.stop()
        return False

    # =========================================================================
    # SYNC
    # =========================================================================

    def sync_now(self) -> SyncOutcome:
        """
        Push every pending record as one batch.

        Returns:
            SyncOutcome; never raises for network, server or storage failures
        """
        with self._lock:
            if self._state.phase is CoordinatorPhase.SYNCING:
                logger.debug("Sync requested while another is in flight")
                return SyncOutcome(SyncOutcomeStatus.ALREADY_IN_PROGRESS, "Sync already in progress")
            if not self._connection.is_online:
                logger.debug("Cannot sync: offline")
                return SyncOutcome(SyncOutcomeStatus.OFFLINE, "No internet connection")
            self._state.phase = CoordinatorPhase.SYNCING

        self._notify_callbacks()
        outcome = None
        try:
            outcome = self._perform_sync()
            return outcome
        finally:
            with self._lock:
                self._state.phase = CoordinatorPhase.IDLE
                if outcome is not None:
                    self._state.last_outcome = outcome.status
                    self._state.total_synced += len(outcome.synced_ids)
            self._notify_callbacks()

    def _failed(self, error: CaptureError) -> SyncOutcome:
        logger.warning(f"Sync failed, all records stay pending: {error}")
        return SyncOutcome(
            SyncOutcomeStatus.FAILED,
            f"Sync failed: {error.message}",
            error=error,
        )

    def _perform_sync(self) -> SyncOutcome:
        try:
            pending = self._store.list_pending()
        except CaptureError as e:
            return self._failed(e)

        if not pending:
            self.refresh_pending_count()
            return SyncOutcome(SyncOutcomeStatus.NOTHING_TO_SYNC, "Nothing to sync")

        try:
            with LogContext(logger, f"Submitting {len(pending)} pending records"):
                response = self._client.submit_records(pending)
        except CaptureError as e:
            return self._failed(e)
        except Exception as e:
            return self._failed(RemoteError(f"Unexpected sync error: {e}"))

        self._record_attempt()

        try:
            self._store.mark_synced_many(response.success_ids)
        except CaptureError as e:
            return self._failed(e)

        self.refresh_pending_count()
        logger.info(
            f"Sync complete: {len(response.success_ids)} synced, "
            f"{len(response.failed)} failed, {self._state.pending_count} still pending"
        )
        return SyncOutcome(
            SyncOutcomeStatus.COMPLETED,
            f"Synced {response.successful} of {response.total} records",
            total=response.total,
            successful=response.successful,
            synced_ids=list(response.success_ids),
            failed=list(response.failed),
        )

    def _record_attempt(self) -> None:
        now = self._clock()
        self._state.last_sync_attempt = now
        if self._db is not None:
            with ErrorContext("Persisting last sync attempt"):
                self._db.set_setting(self.LAST_SYNC_SETTING, now.isoformat())

    def refresh_pending_count(self) -> int:
        """Recompute the cached pending count from the store."""
        with ErrorContext("Refreshing pending count"):
            self._state.pending_count = self._store.pending_count()
        self._notify_callbacks()
        return self._state.pending_count

    # =========================================================================
    # AUTOMATIC TRIGGER
    # =========================================================================

    def _on_connection_change(self, state: ConnectionState, previous: ConnectionStatus) -> None:
        self._state.connectivity = state.status

        if state.status is not ConnectionStatus.ONLINE:
            self._cancel_scheduled_sync()
            return

        if previous is ConnectionStatus.ONLINE:
            return
        if self._state.pending_count > 0 and self._state.phase is CoordinatorPhase.IDLE:
            logger.info("Connection restored, scheduling sync")
            self._schedule_sync()

    def _schedule_sync(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer_generation += 1
            callback = partial(self._run_scheduled_sync, self._timer_generation)
            timer = self._timer_factory(self._debounce_seconds, callback)
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _cancel_scheduled_sync(self) -> None:
        with self._lock:
            # A timer already past its own cancel check sees the bump and bails
            self._timer_generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @error_boundary(default_return=None)
    def _run_scheduled_sync(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation:
                logger.debug("Scheduled sync superseded, skipping")
                return
            self._timer = None
        outcome = self.sync_now()
        logger.info(f"Automatic sync: {outcome.message}")

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        state = self.state
        for callback in list(self._callbacks):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        state = self.state
        return {
            "is_syncing": state.phase is CoordinatorPhase.SYNCING,
            "is_online": state.connectivity is ConnectionStatus.ONLINE,
            "pending_count": state.pending_count,
            "last_sync_attempt": state.last_sync_attempt.isoformat() if state.last_sync_attempt else None,
            "last_outcome": state.last_outcome.value if state.last_outcome else None,
            "total_synced": state.total_synced,
        }
