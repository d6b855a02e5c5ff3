from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from .errors import PersistenceError
from .models import DriveConfig, Note, Project, SyncSnapshot, Task, TimesheetEntry, utc_now
from .store import KEYS, LocalStore, StoredState

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]

COLLECTIONS = ("projects", "entries", "notes", "tasks")


class Phase(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"


# PUBLIC_INTERFACE
class AppState:
    """
    In-memory application state backed by the local store.

    Values are replaced wholesale through commit(): each changed value is
    persisted first and only then becomes visible, after which every
    subscribed listener is called with the changed field name. Readers get
    copies of the collections; records themselves are treated as immutable.
    """

    def __init__(self, store: LocalStore, loaded: Optional[StoredState] = None) -> None:
        self._store = store
        self._values: dict = vars(loaded if loaded is not None else store.load()).copy()
        self._listeners: List[ChangeListener] = []
        self.phase = Phase.INITIALIZING

    @property
    def projects(self) -> List[Project]:
        return list(self._values["projects"])

    @property
    def entries(self) -> List[TimesheetEntry]:
        return list(self._values["entries"])

    @property
    def notes(self) -> List[Note]:
        return list(self._values["notes"])

    @property
    def tasks(self) -> List[Task]:
        return list(self._values["tasks"])

    @property
    def drive_config(self) -> DriveConfig:
        return self._values["drive_config"]

    @property
    def autosave_enabled(self) -> bool:
        return self._values["autosave_enabled"]

    @property
    def sync_revision(self) -> Optional[str]:
        return self._values["sync_revision"]

    def mark_ready(self) -> None:
        self.phase = Phase.READY

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def commit(self, **changes: Any) -> None:
        """Persist and apply the given field values, then notify listeners."""
        unknown = set(changes) - set(KEYS)
        if unknown:
            raise KeyError(f"Unknown state fields: {sorted(unknown)}")
        persisted: List[str] = []
        try:
            for name, value in changes.items():
                self._store.persist(name, value)
                persisted.append(name)
        except PersistenceError:
            self._restore(persisted)
            raise
        for name, value in changes.items():
            self._values[name] = list(value) if name in COLLECTIONS else value
        for name in changes:
            for listener in self._listeners:
                listener(name)

    def remember(self, name: str, value: Any) -> None:
        """Set a value in memory only: nothing is persisted and no listener runs."""
        if name not in KEYS:
            raise KeyError(f"Unknown state field: {name}")
        self._values[name] = value

    def _restore(self, names: List[str]) -> None:
        """Write the current in-memory values of names back to the store."""
        for name in names:
            try:
                self._store.persist(name, self._values[name])
            except PersistenceError:
                logger.error("Could not restore %s after a failed commit", name)

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            projects=self.projects,
            entries=self.entries,
            notes=self.notes,
            tasks=self.tasks,
            last_updated=utc_now(),
        )

    def apply_snapshot(self, snapshot: SyncSnapshot, revision: Optional[str] = None) -> List[str]:
        """
        Replace each collection present in snapshot. Collections missing from
        it are left untouched. Returns the names of the replaced collections.
        """
        changes: dict = {
            name: getattr(snapshot, name)
            for name in COLLECTIONS
            if getattr(snapshot, name) is not None
        }
        replaced = list(changes)
        if revision is not None:
            changes["sync_revision"] = revision
        if changes:
            self.commit(**changes)
        logger.info("Applied snapshot collections: %s", ", ".join(replaced) or "none")
        return replaced
