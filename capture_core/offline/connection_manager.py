# =============================================================================
# capture_core/offline/connection_manager.py
# Connection Status Detection and Management
# =============================================================================
"""
ConnectionManager - detects and monitors reachability of the remote service.

Features:
- TCP probe against the service host
- Periodic health checks on a daemon thread (explicit start/stop)
- Event callbacks for status changes
- Manual status push for platform hooks and tests
"""

from __future__ import annotations
import socket
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
import logging

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"         # Initial state


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


class ConnectionManager:
    """
    Owns the device's view of connectivity.

    Usage:
        manager = ConnectionManager("api.example.org", 443)
        manager.register_callback(on_change)
        manager.start_monitoring()
        ...
        manager.stop_monitoring()
    """

    # Configuration
    CHECK_INTERVAL_ONLINE = 30      # Seconds between checks when online
    CHECK_INTERVAL_OFFLINE = 10     # Seconds between checks when offline
    CONNECTION_TIMEOUT = 5          # Timeout for connection tests

    def __init__(
        self,
        probe_host: Optional[str] = None,
        probe_port: int = 443,
        timeout: float = CONNECTION_TIMEOUT,
        check_interval_online: float = CHECK_INTERVAL_ONLINE,
        check_interval_offline: float = CHECK_INTERVAL_OFFLINE,
    ):
        self.probe_host = probe_host
        self.probe_port = probe_port
        self.timeout = timeout
        self.check_interval_online = check_interval_online
        self.check_interval_offline = check_interval_offline

        self._state = ConnectionState()
        self._state_lock = threading.Lock()
        self._callbacks: List[Callable[[ConnectionState, ConnectionStatus], None]] = []
        self._monitor_thread: Optional[threading.Thread] = None
        self._stop_monitoring = threading.Event()

    @property
    def state(self) -> ConnectionState:
        """Snapshot of the current connection state."""
        return replace(self._state)

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return self._state.status == ConnectionStatus.OFFLINE

    def _probe(self) -> bool:
        """
        Try a TCP connection to the service host.

        Returns:
            True if the host accepted the connection
        """
        if not self.probe_host:
            self._state.error_message = "No service host configured"
            return False

        try:
            with socket.create_connection((self.probe_host, self.probe_port), timeout=self.timeout):
                return True
        except OSError as e:
            self._state.error_message = str(e)
            logger.debug(f"Probe of {self.probe_host}:{self.probe_port} failed: {e}")
            return False

    def check_connection(self) -> ConnectionState:
        """
        Probe the service and update state.

        Returns:
            Updated ConnectionState
        """
        reachable = self._probe()
        return self.set_status(ConnectionStatus.ONLINE if reachable else ConnectionStatus.OFFLINE)

    def is_reachable(self) -> bool:
        """Fresh probe; used by the schema resolver."""
        return self.check_connection().status == ConnectionStatus.ONLINE

    def set_status(self, status: ConnectionStatus) -> ConnectionState:
        """
        Record a new status (from a probe or an OS network event) and notify
        callbacks if it changed.
        """
        with self._state_lock:
            old_status = self._state.status
            now = datetime.now()
            self._state.status = status
            self._state.last_check = now
            if status == ConnectionStatus.ONLINE:
                self._state.last_online = now
                self._state.consecutive_failures = 0
                self._state.error_message = None
            else:
                self._state.consecutive_failures += 1
            changed = old_status != status

        if changed:
            logger.info(f"Connection status changed: {old_status.value} -> {status.value}")
            self._notify_callbacks(old_status)

        return self.state

    # =========================================================================
    # MONITORING
    # =========================================================================

    def start_monitoring(self) -> None:
        """Start background connection monitoring."""
        if self._monitor_thread is not None and self._monitor_thread.is_alive():
            return

        self._stop_monitoring.clear()
        self._monitor_thread = threading.Thread(
            target=self._monitoring_loop,
            daemon=True,
            name="ConnectionMonitor"
        )
        self._monitor_thread.start()
        logger.debug("Connection monitoring started")

    def stop_monitoring(self) -> None:
        """Stop background connection monitoring."""
        self._stop_monitoring.set()
        if self._monitor_thread:
            self._monitor_thread.join(timeout=self.timeout + 1)
            self._monitor_thread = None
        logger.debug("Connection monitoring stopped")

    def _monitoring_loop(self) -> None:
        """Background monitoring loop: check now, then on an interval."""
        while not self._stop_monitoring.is_set():
            try:
                self.check_connection()
            except Exception as e:
                logger.error(f"Error in connection check: {e}")

            interval = (
                self.check_interval_online
                if self.is_online
                else self.check_interval_offline
            )
            if self._stop_monitoring.wait(timeout=interval):
                break

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: Callable[[ConnectionState, ConnectionStatus], None]) -> None:
        """
        Register a callback for connection status changes.

        Args:
            callback: called with (new ConnectionState, previous ConnectionStatus)
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, previous: ConnectionStatus) -> None:
        state = self.state
        for callback in list(self._callbacks):
            try:
                callback(state, previous)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        state = self.state
        return {
            "status": state.status.value,
            "is_online": state.status == ConnectionStatus.ONLINE,
            "last_check": state.last_check.isoformat() if state.last_check else None,
            "last_online": state.last_online.isoformat() if state.last_online else None,
            "failures": state.consecutive_failures,
            "error": state.error_message,
        }
