"""
Sync orchestrator.

Pushes and pulls the snapshot of all collections to the remote backup file.
Auto-save is debounced: every relevant change restarts a timer and a save is
attempted only once no change happened for the whole debounce period.

Writes are guarded twice. In-process, saves and loads share one asyncio.Lock
so a manual save cannot interleave with an auto-save. Across devices, the
remote revision last written or loaded is remembered (and persisted); a save
is rejected with SyncConflictError when the remote file has moved on since,
unless forced.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Set

from pydantic import ValidationError

from .errors import PersistenceError, RemoteError, SyncConflictError, WorkflowError
from .models import SyncSnapshot
from .remote import RemoteFile
from .state import COLLECTIONS, AppState, Phase

logger = logging.getLogger(__name__)

AUTOSAVE_TRIGGERS = frozenset(COLLECTIONS) | {"autosave_enabled"}


class SyncStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SUCCESS = "success"
    ERROR = "error"


# PUBLIC_INTERFACE
class SyncOrchestrator:
    def __init__(
        self,
        state: AppState,
        remote: RemoteFile,
        debounce_seconds: float = 5.0,
        success_display_seconds: float = 3.0,
    ) -> None:
        self._state = state
        self._remote = remote
        self.debounce_seconds = debounce_seconds
        self.success_display_seconds = success_display_seconds

        self.status = SyncStatus.IDLE
        self.last_error: Optional[str] = None
        self.last_saved_at: Optional[datetime] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = asyncio.Lock()
        self._pending: Optional[asyncio.TimerHandle] = None
        self._reset: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a debounced save is waiting to fire."""
        return self._pending is not None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._state.subscribe(self._on_change)

    async def stop(self) -> None:
        for handle in (self._pending, self._reset):
            if handle is not None:
                handle.cancel()
        self._pending = self._reset = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_change(self, name: str) -> None:
        if name not in AUTOSAVE_TRIGGERS or self._loop is None:
            return
        # Loading local values at startup must never overwrite the remote file.
        if self._state.phase is Phase.INITIALIZING:
            return
        self._loop.call_soon_threadsafe(self._restart_debounce)

    def _restart_debounce(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if not self._state.autosave_enabled or not self._remote.ready:
            return
        self._pending = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._pending = None
        task = self._loop.create_task(self._auto_save())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _auto_save(self) -> None:
        if not self._remote.signed_in:
            logger.debug("Auto-save skipped: no drive session")
            return
        try:
            await self.save()
        except WorkflowError as exc:
            logger.warning("Auto-save failed: %s", exc)

    async def save(self, force: bool = False) -> SyncSnapshot:
        """Write the current snapshot to the remote file."""
        async with self._lock:
            self._set_status(SyncStatus.SAVING)
            snapshot = self._state.snapshot()
            try:
                if not force:
                    await self._check_revision()
                revision = await self._remote.write(snapshot.to_document())
            except Exception as exc:
                self.last_error = str(exc)
                self._set_status(SyncStatus.ERROR)
                logger.error("Sync save failed: %s", exc)
                raise
            try:
                self._state.commit(sync_revision=revision)
            except PersistenceError as exc:
                # The remote file is written; keep its revision for this session.
                self._state.remember("sync_revision", revision)
                logger.warning("Saved remotely but could not store revision %s: %s", revision, exc)
            self.last_error = None
            self.last_saved_at = snapshot.last_updated
            self._set_status(SyncStatus.SUCCESS)
            logger.info("Saved snapshot to %s (revision %s)", self._remote.file_name, revision)
            return snapshot

    async def load(self) -> Optional[SyncSnapshot]:
        """
        Read the remote file and replace every local collection it contains.
        Returns None when there is no remote backup.
        """
        async with self._lock:
            document = await self._remote.read()
            if document is None:
                return None
            try:
                snapshot = SyncSnapshot.model_validate(document.data)
            except ValidationError as exc:
                raise RemoteError("Remote backup does not contain valid workflow data") from exc
            self._state.apply_snapshot(snapshot, revision=document.revision)
            return snapshot

    async def _check_revision(self) -> None:
        current = await self._remote.revision()
        known = self._state.sync_revision
        if current is not None and current != known:
            raise SyncConflictError(expected=known, actual=current)

    def _set_status(self, status: SyncStatus) -> None:
        self.status = status
        if self._reset is not None:
            self._reset.cancel()
            self._reset = None
        if status is SyncStatus.SUCCESS and self._loop is not None:
            self._reset = self._loop.call_later(self.success_display_seconds, self._back_to_idle)

    def _back_to_idle(self) -> None:
        self._reset = None
        if self.status is SyncStatus.SUCCESS:
            self.status = SyncStatus.IDLE

