# =============================================================================
# tests/integration/test_offline_flow.py
# Integration Tests for Capture -> Store -> Sync and Schema Resolution
# =============================================================================

import threading
import pytest


@pytest.fixture
def runtime(tmp_path, mock_session):
    """Full runtime on a temporary database with HTTP mocked at the session"""
    from capture_core import CaptureRuntime, Settings

    settings = Settings(db_path=tmp_path / "capture.db", api_base_url="http://svc.test/api")
    rt = CaptureRuntime.from_settings(settings, session=mock_session, monitor=False)
    rt.start()
    yield rt
    rt.stop()


def _sync_server(response_factory, reject=()):
    """Session.request side effect acting as the remote service"""

    def handle(method, url, params=None, json=None, headers=None, timeout=None):
        if url.endswith("/sync"):
            ids = [r["id"] for r in json["records"]]
            ok = [i for i in ids if i not in reject]
            return response_factory(200, {
                "total": len(ids),
                "successful": len(ok),
                "results": {
                    "success": [{"id": i} for i in ok],
                    "failed": [{"id": i, "reason": "rejected"} for i in ids if i in reject],
                },
            })
        if url.endswith("/schema"):
            return response_factory(200, {
                "version": 2,
                "elements": [{"name": "fullName", "label": "Full Name", "type": "text", "required": True}],
            })
        return response_factory(404, {"error": "not found"})

    return handle


class TestCaptureAndSync:
    """Submit offline, reconnect, sync"""

    def test_offline_capture_then_reconnect_sync(self, runtime, mock_session, response_factory, monkeypatch):
        """Reconnecting with pending records triggers one automatic sync"""
        from capture_core.offline import ConnectionStatus, SyncOutcomeStatus

        monkeypatch.setattr(runtime.connection, "_probe", lambda: False)
        runtime.capture.load_schema()
        assert runtime.connection.is_offline

        first = runtime.capture.submit({"firstName": "Ama", "lastName": "Mensah"}).data
        second = runtime.capture.submit({"firstName": "Kofi", "lastName": "Boateng"}).data
        assert runtime.coordinator.sync_now().message == "No internet connection"
        mock_session.request.assert_not_called()

        mock_session.request.side_effect = _sync_server(response_factory, reject={second.id})
        synced = threading.Event()
        runtime.coordinator.register_callback(
            lambda state: state.last_outcome is SyncOutcomeStatus.COMPLETED and synced.set()
        )

        runtime.connection.set_status(ConnectionStatus.ONLINE)

        assert synced.wait(timeout=5)
        assert not runtime.store.get(first.id).is_pending
        assert runtime.store.get(second.id).is_pending
        assert runtime.get_status()["sync"]["pending_count"] == 1

        # The rejected record is retried on the next trigger
        assert runtime.coordinator.sync_now().message == "Synced 0 of 1 records"
        assert mock_session.request.call_count == 2

    def test_records_survive_restart(self, tmp_path, mock_session):
        from capture_core import CaptureRuntime, Settings

        settings = Settings(db_path=tmp_path / "capture.db")

        with CaptureRuntime.from_settings(settings, session=mock_session, monitor=False) as rt:
            rt.capture.submit({"firstName": "Ama", "lastName": "Mensah"})

        with CaptureRuntime.from_settings(settings, session=mock_session, monitor=False) as rt:
            assert rt.coordinator.pending_count == 1

    def test_stop_releases_storage(self, runtime):
        from capture_core.errors import NotInitializedError

        runtime.stop()

        assert not runtime.db.is_initialized
        with pytest.raises(NotInitializedError):
            runtime.store.list_all()


class TestSchemaFlow:
    """Remote schema is cached and reused offline"""

    def test_remote_then_cached(self, runtime, mock_session, response_factory, monkeypatch):
        from capture_core.schema import SchemaSource

        mock_session.request.side_effect = _sync_server(response_factory)
        monkeypatch.setattr(runtime.connection, "_probe", lambda: True)

        online = runtime.capture.load_schema()
        assert online.metadata == {"source": "remote", "version": 2}

        monkeypatch.setattr(runtime.connection, "_probe", lambda: False)
        offline = runtime.resolver.resolve()

        assert offline.source is SchemaSource.CACHE
        assert [f.name for f in offline.schema] == ["fullName"]

        result = runtime.capture.submit({})
        assert result.metadata["missing_labels"] == ["Full Name"]

    def test_admin_publish_uses_stored_token(self, runtime, mock_session, response_factory):
        from capture_core.schema import SchemaBuilder

        mock_session.request.return_value = response_factory(200, {"token": "t-9"})
        assert runtime.admin.login("admin@example.org", "secret").success
        assert runtime.db.get_setting("admin_token") == "t-9"

        builder = SchemaBuilder.from_schema(runtime.capture.schema)
        builder.add_field("Baptism Date", "date")
        mock_session.request.return_value = response_factory(200, {"version": 3})

        assert runtime.admin.save_schema(builder).success
        assert mock_session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer t-9"}
