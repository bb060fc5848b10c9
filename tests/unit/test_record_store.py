# =============================================================================
# tests/unit/test_record_store.py
# Unit Tests for RecordStore
# =============================================================================

import pytest
from datetime import datetime


class TestRecordStoreUpsert:
    """Test saving captures"""

    def test_new_record_is_pending_with_generated_id(self, store):
        """A record without an id gets one and starts pending"""
        from capture_core.offline.models import SyncStatus

        record = store.upsert({"firstName": "Ama", "lastName": "Mensah"})

        assert record.id
        assert record.sync_status is SyncStatus.PENDING
        assert record.fields == {"firstName": "Ama", "lastName": "Mensah"}
        assert store.get(record.id).fields["firstName"] == "Ama"

    def test_generated_ids_are_unique(self, store):
        ids = {store.upsert({"n": i}).id for i in range(20)}
        assert len(ids) == 20

    def test_resave_keeps_created_at_and_refreshes_updated_at(self, store):
        """Editing a record never moves its creation time"""
        first = store.upsert({"id": "r1", "firstName": "Ama"})
        second = store.upsert({"id": "r1", "firstName": "Akosua"})

        stored = store.get("r1")
        assert stored.created_at == first.created_at
        assert stored.updated_at == second.updated_at
        assert stored.updated_at > first.updated_at
        assert stored.fields == {"firstName": "Akosua"}
        assert len(store.list_all()) == 1

    def test_resave_of_synced_record_keeps_status(self, store):
        store.upsert({"id": "r1", "firstName": "Ama"})
        store.mark_synced("r1")

        record = store.upsert({"id": "r1", "firstName": "Ama", "phone": "024"})

        assert not record.is_pending
        assert not store.get("r1").is_pending

    def test_id_is_not_stored_inside_fields(self, store):
        store.upsert({"id": "r1", "firstName": "Ama"})
        assert "id" not in store.get("r1").fields

    def test_upsert_before_initialize_raises(self, db_path):
        from capture_core.errors import NotInitializedError
        from capture_core.offline.local_database import LocalDatabase
        from capture_core.offline.record_store import RecordStore

        store = RecordStore(LocalDatabase(db_path))

        with pytest.raises(NotInitializedError):
            store.upsert({"firstName": "Ama"})

    def test_unserializable_value_writes_nothing(self, store):
        """A failed save leaves the table unchanged"""
        with pytest.raises(TypeError):
            store.upsert({"id": "r1", "when": object()})

        assert store.get("r1") is None


class TestRecordStoreSyncState:
    """Test sync status transitions"""

    def test_mark_synced_removes_from_pending(self, store):
        store.upsert({"id": "a"})
        store.upsert({"id": "b"})

        assert store.mark_synced("a") is True

        pending_ids = [r.id for r in store.list_pending()]
        assert pending_ids == ["b"]
        assert store.pending_count() == 1

    def test_mark_synced_unknown_id_is_noop(self, store):
        store.upsert({"id": "a"})

        assert store.mark_synced("missing") is False
        assert store.pending_count() == 1

    def test_mark_synced_many(self, store):
        for rid in ("a", "b", "c"):
            store.upsert({"id": rid})

        changed = store.mark_synced_many(["a", "c", "zzz"])

        assert changed == 2
        assert [r.id for r in store.list_pending()] == ["b"]

    def test_mark_synced_many_empty(self, store):
        assert store.mark_synced_many([]) == 0

    def test_remove(self, store):
        store.upsert({"id": "a"})

        assert store.remove("a") is True
        assert store.remove("a") is False
        assert store.get("a") is None


class TestRecordStoreReads:
    """Test listing and ordering"""

    def test_pending_is_newest_first(self, store):
        for rid in ("first", "second", "third"):
            store.upsert({"id": rid})

        assert [r.id for r in store.list_pending()] == ["third", "second", "first"]

    def test_list_all_includes_synced(self, store):
        store.upsert({"id": "a"})
        store.upsert({"id": "b"})
        store.mark_synced("a")

        assert {r.id for r in store.list_all()} == {"a", "b"}

    def test_record_wire_shape(self, store):
        record = store.upsert({"id": "a", "firstName": "Ama"})
        wire = record.to_wire()

        assert wire["id"] == "a"
        assert wire["firstName"] == "Ama"
        assert wire["syncStatus"] == "pending"
        assert datetime.fromisoformat(wire["createdAt"]) == record.created_at

    def test_to_dataframe(self, store):
        store.upsert({"id": "a", "firstName": "Ama"})
        store.upsert({"id": "b", "firstName": "Kofi"})
        store.mark_synced("a")

        df = store.to_dataframe()
        pending_df = store.to_dataframe(pending_only=True)

        assert len(df) == 2
        assert "firstName" in df.columns
        assert list(pending_df["id"]) == ["b"]

    def test_to_dataframe_empty(self, store):
        df = store.to_dataframe()
        assert df.empty
        assert "sync_status" in df.columns


class TestRecordStoreCallbacks:
    """Test change notifications"""

    def test_callbacks_fire_on_mutation(self, store):
        calls = []
        store.register_callback(lambda: calls.append(1))

        store.upsert({"id": "a"})
        store.mark_synced("a")
        store.remove("a")

        assert len(calls) == 3

    def test_unregistered_callback_not_called(self, store):
        calls = []
        callback = lambda: calls.append(1)  # noqa: E731
        store.register_callback(callback)
        store.unregister_callback(callback)

        store.upsert({"id": "a"})

        assert calls == []

    def test_failing_callback_does_not_break_save(self, store):
        def broken():
            raise RuntimeError("boom")

        store.register_callback(broken)
        record = store.upsert({"id": "a"})

        assert store.get(record.id) is not None
