import pytest

from src.workflow.db import SQLiteBackend
from src.workflow.errors import PersistenceError
from src.workflow.models import DriveConfig, Note, Project, TimesheetEntry
from src.workflow.state import AppState, Phase
from src.workflow.storage import InMemoryBackend
from src.workflow.store import KEYS, LocalStore


class BrokenBackend(InMemoryBackend):
    def set(self, key, value):
        raise OSError("disk full")


class FailingKeyBackend(InMemoryBackend):
    """Fails writes of failing_key once it is set."""

    failing_key = None

    def set(self, key, value):
        if key == self.failing_key:
            raise OSError("disk full")
        super().set(key, value)


class TestLocalStore:
    def test_fresh_install_defaults(self):
        loaded = LocalStore(InMemoryBackend()).load()
        assert loaded.projects == []
        assert loaded.entries == []
        assert loaded.notes == []
        assert [t.id for t in loaded.tasks] == ["1", "2"]
        assert loaded.drive_config == DriveConfig()
        assert loaded.autosave_enabled is False
        assert loaded.sync_revision is None

    def test_unreadable_value_falls_back_to_default(self):
        backend = InMemoryBackend({"wf_notes": "{not json", "wf_autosave": "true"})
        loaded = LocalStore(backend).load()
        assert loaded.notes == []
        assert loaded.autosave_enabled is True

    def test_wrong_shape_falls_back_to_default(self):
        backend = InMemoryBackend({"wf_tasks": '[{"id": "x"}]'})
        assert [t.id for t in LocalStore(backend).load().tasks] == ["1", "2"]

    def test_camel_case_storage(self):
        backend = InMemoryBackend()
        LocalStore(backend).persist("entries", [TimesheetEntry(project_id="p1")])
        raw = backend.get(KEYS["entries"])
        assert '"projectId":"p1"' in raw
        assert LocalStore(backend).load().entries[0].hours == {0: 0, 1: 0, 2: 0, 3: 0, 4: 0}

    def test_persist_none_deletes(self):
        backend = InMemoryBackend({"wf_sync_revision": "7"})
        LocalStore(backend).persist("sync_revision", None)
        assert backend.get("wf_sync_revision") is None

    def test_sqlite_round_trip(self, tmp_path):
        path = str(tmp_path / "nested" / "workflow.db")
        store = LocalStore(SQLiteBackend(path))
        store.persist("projects", [Project(id="p1", name="Website", color="red")])
        store.persist("autosave_enabled", True)
        store.persist("autosave_enabled", False)

        reloaded = LocalStore(SQLiteBackend(path)).load()
        assert [p.name for p in reloaded.projects] == ["Website"]
        assert reloaded.autosave_enabled is False

    def test_sqlite_delete(self, tmp_path):
        backend = SQLiteBackend(str(tmp_path / "workflow.db"))
        backend.set("k", "v")
        assert backend.delete("k") is True
        assert backend.delete("k") is False
        assert backend.get("k") is None


class TestAppState:
    def test_starts_initializing(self):
        state = AppState(LocalStore(InMemoryBackend()))
        assert state.phase is Phase.INITIALIZING
        state.mark_ready()
        assert state.phase is Phase.READY

    def test_commit_persists_then_notifies(self):
        backend = InMemoryBackend()
        state = AppState(LocalStore(backend))
        seen = []
        state.subscribe(lambda name: seen.append((name, backend.get(KEYS[name]) is not None)))

        state.commit(notes=[Note(title="a")])
        assert seen == [("notes", True)]
        assert [n.title for n in AppState(LocalStore(backend)).notes] == ["a"]

    def test_failed_persist_keeps_previous_value(self):
        state = AppState(LocalStore(BrokenBackend()))
        seen = []
        state.subscribe(seen.append)
        with pytest.raises(PersistenceError):
            state.commit(notes=[Note()])
        assert state.notes == []
        assert seen == []

    def test_failed_multi_field_commit_changes_nothing(self):
        backend = FailingKeyBackend()
        state = AppState(LocalStore(backend))
        project = Project(id="p1", name="Website", color="red")
        state.commit(projects=[project], entries=[TimesheetEntry(project_id="p1")])
        backend.failing_key = KEYS["entries"]
        seen = []
        state.subscribe(seen.append)

        with pytest.raises(PersistenceError):
            state.commit(projects=[], entries=[])

        assert state.projects == [project]
        assert [e.project_id for e in state.entries] == ["p1"]
        assert [p.id for p in LocalStore(backend).load().projects] == ["p1"]
        assert seen == []

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            AppState(LocalStore(InMemoryBackend())).commit(colour="red")

    def test_readers_get_copies(self):
        state = AppState(LocalStore(InMemoryBackend()))
        state.tasks.clear()
        assert len(state.tasks) == 2
