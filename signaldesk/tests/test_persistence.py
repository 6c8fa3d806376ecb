"""
Tests for Session and Reviewer Persistence

Tests session capping, fail-open reads and storage write failures.
"""

import json

import pytest


def make_session(index):
    from signaldesk.common.schemas import SavedSession

    return SavedSession(
        id=f"session-{index}",
        name=f"Session {index}",
        created_at=f"2026-01-01T00:00:{index:02d}+00:00",
        intake_text=f"note {index}",
    )


class TestSessions:
    """Tests for session persistence"""

    @pytest.fixture
    def store(self):
        from signaldesk.common.storage import MemoryStore

        return MemoryStore()

    def test_empty_store(self, store):
        from signaldesk.engine.persistence import load_sessions

        assert load_sessions(store) == []

    def test_newest_first(self, store):
        from signaldesk.engine.persistence import load_sessions, save_session_to_storage

        save_session_to_storage(make_session(1), load_sessions(store), store)
        save_session_to_storage(make_session(2), load_sessions(store), store)

        assert [s.id for s in load_sessions(store)] == ["session-2", "session-1"]

    def test_twenty_first_session_evicts_oldest(self, store):
        from signaldesk.engine.persistence import load_sessions, save_session_to_storage

        for index in range(1, 22):
            saved = save_session_to_storage(make_session(index), load_sessions(store), store)

        sessions = load_sessions(store)
        assert len(saved) == 20
        assert len(sessions) == 20
        assert sessions[0].id == "session-21"
        assert "session-1" not in {s.id for s in sessions}
        assert sessions[-1].id == "session-2"

    def test_custom_cap(self, store):
        from signaldesk.engine.persistence import load_sessions, save_session_to_storage

        for index in range(1, 5):
            save_session_to_storage(make_session(index), load_sessions(store), store, cap=2)

        assert [s.id for s in load_sessions(store)] == ["session-4", "session-3"]

    @pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', '[{"id": 1}]'])
    def test_malformed_data_reads_as_empty(self, store, raw):
        from signaldesk.common.config import SESSION_KEY
        from signaldesk.engine.persistence import load_sessions

        store.set(SESSION_KEY, raw)

        assert load_sessions(store) == []

    def test_stored_with_camel_case_keys(self, store):
        from signaldesk.common.config import SESSION_KEY
        from signaldesk.engine.persistence import save_session_to_storage

        save_session_to_storage(make_session(1), [], store)
        stored = json.loads(store.get(SESSION_KEY))

        assert stored[0]["createdAt"] == "2026-01-01T00:00:01+00:00"
        assert stored[0]["intakeText"] == "note 1"

    def test_quota_exceeded_raises(self):
        from signaldesk.common.errors import StorageWriteError
        from signaldesk.common.storage import MemoryStore
        from signaldesk.common.config import SESSION_KEY
        from signaldesk.engine.persistence import save_session_to_storage

        store = MemoryStore(quota_bytes=10)

        with pytest.raises(StorageWriteError) as exc_info:
            save_session_to_storage(make_session(1), [], store)

        assert exc_info.value.key == SESSION_KEY
        assert store.get(SESSION_KEY) is None

    def test_find_session(self):
        from signaldesk.engine.persistence import find_session

        sessions = [make_session(1), make_session(2)]

        assert find_session(sessions, "session-2").name == "Session 2"
        assert find_session(sessions, "missing") is None


class TestReviewerEntries:
    """Tests for reviewer persistence"""

    @pytest.fixture
    def store(self):
        from signaldesk.common.storage import MemoryStore

        return MemoryStore()

    @pytest.fixture
    def entry(self):
        from signaldesk.common.schemas import DecisionStatus, ReviewerDecision

        return ReviewerDecision(
            decision_id="d-7d-2",
            status=DecisionStatus.ACCEPTED,
            notes="ok",
            updated_at="2026-01-01T00:00:00+00:00",
        )

    def test_round_trip(self, store, entry):
        from signaldesk.engine.persistence import load_reviewer_decisions, save_reviewer_decision

        returned = save_reviewer_decision(entry, {}, "intake:abc", store)

        assert returned == {"d-7d-2": entry}
        assert load_reviewer_decisions("intake:abc", store) == {"d-7d-2": entry}

    def test_upsert_replaces_same_decision(self, store, entry):
        from signaldesk.engine.persistence import load_reviewer_decisions, save_reviewer_decision
        from signaldesk.common.schemas import DecisionStatus

        current = save_reviewer_decision(entry, {}, "intake:abc", store)
        rejected = entry.model_copy(update={"status": DecisionStatus.REJECTED})
        save_reviewer_decision(rejected, current, "intake:abc", store)

        loaded = load_reviewer_decisions("intake:abc", store)
        assert len(loaded) == 1
        assert loaded["d-7d-2"].status == DecisionStatus.REJECTED

    def test_scopes_kept_apart(self, store, entry):
        from signaldesk.common.config import REVIEWER_KEY
        from signaldesk.engine.persistence import load_reviewer_decisions, save_reviewer_decision

        save_reviewer_decision(entry, {}, "intake:aaa", store)
        save_reviewer_decision(entry, {}, "intake:bbb", store)

        stored = json.loads(store.get(REVIEWER_KEY))
        assert set(stored) == {"intake:aaa", "intake:bbb"}
        assert stored["intake:aaa"]["d-7d-2"]["decisionId"] == "d-7d-2"
        assert load_reviewer_decisions("intake:ccc", store) == {}

    def test_corrupt_store_reads_as_empty(self, store):
        from signaldesk.common.config import REVIEWER_KEY
        from signaldesk.engine.persistence import load_reviewer_decisions

        store.set(REVIEWER_KEY, "[1, 2, 3")

        assert load_reviewer_decisions("intake:abc", store) == {}

    def test_write_failure_raises(self, entry):
        from signaldesk.common.errors import StorageWriteError
        from signaldesk.common.storage import MemoryStore
        from signaldesk.engine.persistence import save_reviewer_decision

        with pytest.raises(StorageWriteError):
            save_reviewer_decision(entry, {}, "intake:abc", MemoryStore(quota_bytes=5))


class TestJsonFileStore:
    """Tests for the file-backed store"""

    def test_persists_across_instances(self, tmp_path):
        from signaldesk.common.storage import JsonFileStore

        path = tmp_path / "data" / "store.json"
        JsonFileStore(path).set("key", "value")

        assert JsonFileStore(path).get("key") == "value"
        assert JsonFileStore(path).get("other") is None

    def test_missing_file(self, tmp_path):
        from signaldesk.common.storage import JsonFileStore

        assert JsonFileStore(tmp_path / "nope.json").get("key") is None

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        from signaldesk.common.storage import JsonFileStore

        path = tmp_path / "store.json"
        path.write_text("{broken")
        store = JsonFileStore(path)

        assert store.get("key") is None
        store.set("key", "value")
        assert store.get("key") == "value"

    def test_undecodable_file_treated_as_empty(self, tmp_path):
        from signaldesk.common.storage import JsonFileStore
        from signaldesk.engine.persistence import load_reviewer_decisions, load_sessions

        path = tmp_path / "store.json"
        path.write_bytes(b'{"signaldesk:sessions:v1": "\xff\xfe broken"}')
        store = JsonFileStore(path)

        assert load_sessions(store) == []
        assert load_reviewer_decisions("intake:abc", store) == {}

        store.set("key", "value")
        assert store.get("key") == "value"

    def test_unwritable_location_raises(self, tmp_path):
        from signaldesk.common.errors import StorageWriteError
        from signaldesk.common.storage import JsonFileStore

        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = JsonFileStore(blocker / "store.json")

        with pytest.raises(StorageWriteError) as exc_info:
            store.set("key", "value")

        assert exc_info.value.key == "key"

    def test_satisfies_protocol(self, tmp_path):
        from signaldesk.common.storage import JsonFileStore, KeyValueStore, MemoryStore

        assert isinstance(JsonFileStore(tmp_path / "s.json"), KeyValueStore)
        assert isinstance(MemoryStore(), KeyValueStore)
