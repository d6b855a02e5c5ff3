from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .assist import GeminiClient, TextAssistant
from .kanban import KanbanEditor
from .messages import MessageBoard
from .models import DriveConfig, View
from .notepad import NotepadEditor
from .remote import RemoteFile, get_remote
from .settings import Settings
from .state import AppState
from .storage import KeyValueBackend, get_backend
from .store import LocalStore
from .sync import SyncOrchestrator
from .timesheet import TimesheetEditor

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Workspace:
    """
    Top-level controller owning the application state and everything that
    reads or changes it. One instance lives for the lifetime of the app.
    """

    def __init__(
        self,
        settings: Settings,
        backend: Optional[KeyValueBackend] = None,
        remote: Optional[RemoteFile] = None,
        assistant: Optional[TextAssistant] = None,
    ) -> None:
        self.settings = settings
        self.state = AppState(LocalStore(backend or get_backend(settings)))
        self.remote = remote or get_remote(settings)
        assistant = assistant or TextAssistant(
            GeminiClient(settings.gemini_api_key, settings.gemini_model, settings.ai_timeout_seconds)
        )
        self.messages = MessageBoard(settings.status_message_seconds)
        self.sync = SyncOrchestrator(
            self.state,
            self.remote,
            debounce_seconds=settings.autosave_debounce_seconds,
            success_display_seconds=settings.sync_success_display_seconds,
        )
        self.timesheet = TimesheetEditor(self.state)
        self.kanban = KanbanEditor(self.state, assistant)
        self.notepad = NotepadEditor(self.state, self.kanban, assistant)
        self.active_view = View.TIMESHEET

    async def start(self) -> None:
        loop = asyncio.get_running_loop()
        self.messages.attach(loop)
        self.remote.configure(self.state.drive_config)
        self.sync.start(loop)
        self.timesheet.reconcile()
        self.state.mark_ready()
        logger.info(
            "Workspace ready: %d projects, %d notes, %d tasks, autosave %s",
            len(self.state.projects),
            len(self.state.notes),
            len(self.state.tasks),
            "on" if self.state.autosave_enabled else "off",
        )

    async def stop(self) -> None:
        await self.sync.stop()
        self.messages.close()

    def show(self, view: View) -> View:
        self.active_view = view
        return view

    def configure_drive(self, config: DriveConfig) -> None:
        """Store new drive credentials; any open drive session is dropped."""
        self.state.commit(drive_config=config)
        self.remote.configure(config)

    def set_autosave(self, enabled: bool) -> None:
        self.state.commit(autosave_enabled=enabled)
