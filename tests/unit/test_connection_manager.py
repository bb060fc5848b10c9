# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectionManager
# =============================================================================

import socket
import threading
import pytest
from unittest.mock import MagicMock


class TestConnectionStatus:
    """Test status tracking and callbacks"""

    def test_initial_status_unknown(self, connection):
        from capture_core.offline.connection_manager import ConnectionStatus

        assert connection.status is ConnectionStatus.UNKNOWN
        assert not connection.is_online

    def test_callback_gets_new_state_and_previous_status(self, connection):
        from capture_core.offline.connection_manager import ConnectionStatus

        seen = []
        connection.register_callback(lambda state, previous: seen.append((state.status, previous)))

        connection.set_status(ConnectionStatus.OFFLINE)
        connection.set_status(ConnectionStatus.ONLINE)

        assert seen == [
            (ConnectionStatus.OFFLINE, ConnectionStatus.UNKNOWN),
            (ConnectionStatus.ONLINE, ConnectionStatus.OFFLINE),
        ]

    def test_no_callback_without_change(self, connection):
        from capture_core.offline.connection_manager import ConnectionStatus

        connection.set_status(ConnectionStatus.ONLINE)
        seen = []
        connection.register_callback(lambda state, previous: seen.append(state))

        connection.set_status(ConnectionStatus.ONLINE)

        assert seen == []

    def test_failures_counted(self, connection):
        from capture_core.offline.connection_manager import ConnectionStatus

        connection.set_status(ConnectionStatus.OFFLINE)
        connection.set_status(ConnectionStatus.OFFLINE)
        assert connection.state.consecutive_failures == 2

        connection.set_status(ConnectionStatus.ONLINE)
        assert connection.state.consecutive_failures == 0
        assert connection.state.last_online is not None

    def test_status_display(self, online_connection):
        display = online_connection.get_status_display()

        assert display["status"] == "online"
        assert display["is_online"] is True


class TestConnectionProbe:
    """Test the TCP probe"""

    def test_no_host_is_offline(self, connection):
        assert connection.is_reachable() is False
        assert connection.is_offline

    def test_probe_success(self, monkeypatch):
        from capture_core.offline import connection_manager
        from capture_core.offline.connection_manager import ConnectionManager

        fake_socket = MagicMock()
        create = MagicMock(return_value=fake_socket)
        monkeypatch.setattr(connection_manager.socket, "create_connection", create)

        manager = ConnectionManager("svc.test", 8080, timeout=2)

        assert manager.is_reachable() is True
        create.assert_called_once_with(("svc.test", 8080), timeout=2)

    def test_probe_failure(self, monkeypatch):
        from capture_core.offline import connection_manager
        from capture_core.offline.connection_manager import ConnectionManager

        monkeypatch.setattr(
            connection_manager.socket,
            "create_connection",
            MagicMock(side_effect=socket.timeout("timed out")),
        )

        manager = ConnectionManager("svc.test", 8080)
        state = manager.check_connection()

        assert not manager.is_online
        assert state.error_message == "timed out"


class TestConnectionMonitoring:
    """Test the background monitor"""

    def test_start_and_stop(self, connection):
        checked = threading.Event()
        connection.register_callback(lambda state, previous: checked.set())
        connection.check_interval_offline = 0.01

        connection.start_monitoring()
        connection.start_monitoring()  # second call is a no-op
        assert checked.wait(timeout=5)

        connection.stop_monitoring()

        assert connection.is_offline
        assert connection._monitor_thread is None
