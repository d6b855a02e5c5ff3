"""
Local store: loads the persisted collections and settings at startup and
writes each one back, whole, when it changes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import PersistenceError
from .models import DriveConfig, Note, Project, Task, TimesheetEntry, default_tasks
from .storage import KeyValueBackend

logger = logging.getLogger(__name__)

# Field name -> storage key
KEYS: Dict[str, str] = {
    "projects": "wf_projects",
    "entries": "wf_entries",
    "notes": "wf_notes",
    "tasks": "wf_tasks",
    "drive_config": "wf_drive_config",
    "autosave_enabled": "wf_autosave",
    "sync_revision": "wf_sync_revision",
}

_ADAPTERS: Dict[str, TypeAdapter] = {
    "projects": TypeAdapter(List[Project]),
    "entries": TypeAdapter(List[TimesheetEntry]),
    "notes": TypeAdapter(List[Note]),
    "tasks": TypeAdapter(List[Task]),
    "drive_config": TypeAdapter(DriveConfig),
}


@dataclass
class StoredState:
    """Everything the local store holds, with defaults for a fresh install."""

    projects: List[Project] = field(default_factory=list)
    entries: List[TimesheetEntry] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=default_tasks)
    drive_config: DriveConfig = field(default_factory=DriveConfig)
    autosave_enabled: bool = False
    sync_revision: Optional[str] = None


# PUBLIC_INTERFACE
class LocalStore:
    """Serializes application values under fixed keys of a KeyValueBackend."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    def load(self) -> StoredState:
        """
        Read every key. A missing or unreadable value is replaced by its
        default; the failure is logged and otherwise ignored.
        """
        state = StoredState()
        for name, key in KEYS.items():
            raw = self._backend.get(key)
            if raw is None:
                continue
            try:
                setattr(state, name, self._decode(name, raw))
            except (ValueError, ValidationError) as exc:
                logger.warning("Ignoring unreadable value for %s: %s", key, exc)
        return state

    def persist(self, name: str, value: Any) -> None:
        """Overwrite the stored value of name. Raises PersistenceError on failure."""
        key = KEYS[name]
        try:
            if value is None:
                self._backend.delete(key)
            else:
                self._backend.set(key, self._encode(name, value))
        except Exception as exc:
            logger.error("Failed to persist %s: %s", key, exc)
            raise PersistenceError(f"Could not save {name} locally") from exc

    @staticmethod
    def _decode(name: str, raw: str) -> Any:
        if name == "autosave_enabled":
            return raw == "true"
        if name == "sync_revision":
            return raw
        return _ADAPTERS[name].validate_json(raw)

    @staticmethod
    def _encode(name: str, value: Any) -> str:
        if name == "autosave_enabled":
            return "true" if value else "false"
        if name == "sync_revision":
            return str(value)
        return _ADAPTERS[name].dump_json(value, by_alias=True).decode("utf-8")
