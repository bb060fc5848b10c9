# =============================================================================
# capture_core/runtime.py
# Wiring of Store, Client, Connectivity, Sync and Services
# =============================================================================
"""
CaptureRuntime - builds every component once from Settings and owns their
lifecycle. Nothing here is module level; create as many runtimes as needed
(tests create one per temporary database).

Usage:
    settings = load_settings(secrets_path=Path(".secrets/capture.toml"))
    with CaptureRuntime.from_settings(settings) as runtime:
        runtime.capture.load_schema()
        runtime.capture.submit(values)
        runtime.coordinator.sync_now()
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import logging

from capture_core.api import RemoteServiceClient, SettingsCredentialStore
from capture_core.config import Settings
from capture_core.logging import setup_logging
from capture_core.offline import (
    ConnectionManager,
    LocalDatabase,
    RecordStore,
    SchemaCache,
    SyncCoordinator,
)
from capture_core.schema import SchemaResolver
from capture_core.services import AdminService, CaptureService

logger = logging.getLogger(__name__)


class CaptureRuntime:
    """Owns one LocalDatabase and everything built on it."""

    def __init__(
        self,
        db: LocalDatabase,
        store: RecordStore,
        cache: SchemaCache,
        client: RemoteServiceClient,
        connection: ConnectionManager,
        coordinator: SyncCoordinator,
        resolver: SchemaResolver,
        capture: CaptureService,
        admin: AdminService,
        monitor: bool = True,
    ):
        self.db = db
        self.store = store
        self.cache = cache
        self.client = client
        self.connection = connection
        self.coordinator = coordinator
        self.resolver = resolver
        self.capture = capture
        self.admin = admin
        self.monitor = monitor
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        session=None,
        monitor: bool = True,
        configure_logging: bool = False,
    ) -> CaptureRuntime:
        """
        Build every component from settings.

        Args:
            settings: runtime settings (defaults when None)
            session: requests.Session to use for the remote client (tests)
            monitor: run the background connectivity monitor between start/stop
            configure_logging: apply settings.log_level through setup_logging()
        """
        settings = settings or Settings()
        if configure_logging:
            setup_logging(level=settings.log_level)

        db = LocalDatabase(settings.db_path)
        store = RecordStore(db)
        cache = SchemaCache(db)
        credentials = SettingsCredentialStore(db)
        client = RemoteServiceClient(settings.api_config(), credentials=credentials, session=session)
        connection = ConnectionManager(
            probe_host=settings.api_host,
            probe_port=settings.api_port,
            timeout=settings.probe_timeout,
            check_interval_online=settings.check_interval_online,
            check_interval_offline=settings.check_interval_offline,
        )
        coordinator = SyncCoordinator(
            store,
            client,
            connection,
            db=db,
            debounce_seconds=settings.sync_debounce_seconds,
        )
        resolver = SchemaResolver(client, cache, connection.is_reachable)

        return cls(
            db=db,
            store=store,
            cache=cache,
            client=client,
            connection=connection,
            coordinator=coordinator,
            resolver=resolver,
            capture=CaptureService(resolver, store),
            admin=AdminService(client, credentials),
            monitor=monitor,
        )

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Open storage, then subscribe the coordinator and start monitoring."""
        if self._started:
            return

        self.db.initialize()
        try:
            self.coordinator.start()
            if self.monitor:
                self.connection.start_monitoring()
        except BaseException:
            self.coordinator.stop()
            self.db.dispose()
            raise

        self._started = True
        logger.info("Capture runtime started")

    def stop(self) -> None:
        """Release timers, threads, the HTTP session and the database."""
        try:
            self.coordinator.stop()
        finally:
            try:
                self.connection.stop_monitoring()
            finally:
                try:
                    self.client.session.close()
                finally:
                    self.db.dispose()
        if self._started:
            logger.info("Capture runtime stopped")
        self._started = False

    def __enter__(self) -> CaptureRuntime:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.stop()
        return False

    def get_status(self) -> Dict[str, Any]:
        """Combined status for UI display."""
        return {
            "connection": self.connection.get_status_display(),
            "sync": self.coordinator.get_status_display(),
            "schema": self.capture.summary(),
            "admin_authenticated": self.admin.is_authenticated if self.db.is_initialized else False,
        }
