from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

from .assist import AssistResult, Ok, TextAssistant
from .errors import NotFoundError
from .kanban import KanbanEditor
from .models import Note, Task, utc_now
from .state import AppState

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New note"


# PUBLIC_INTERFACE
class NotepadEditor:
    def __init__(self, state: AppState, kanban: KanbanEditor, assistant: TextAssistant) -> None:
        self._state = state
        self._kanban = kanban
        self.assistant = assistant
        self.active_note_id: Optional[str] = None

    def get(self, note_id: str) -> Note:
        for note in self._state.notes:
            if note.id == note_id:
                return note
        raise NotFoundError("Note", note_id)

    @property
    def active_note(self) -> Optional[Note]:
        if self.active_note_id is None:
            return None
        for note in self._state.notes:
            if note.id == self.active_note_id:
                return note
        return None

    def create_note(self) -> Note:
        note = Note(title=DEFAULT_TITLE)
        self._state.commit(notes=[note] + self._state.notes)
        self.active_note_id = note.id
        return note

    def select(self, note_id: str) -> Note:
        note = self.get(note_id)
        self.active_note_id = note.id
        return note

    def update_note(self, note_id: str, title: Optional[str] = None, content: Optional[str] = None) -> Note:
        note = self.get(note_id)
        changes = {"updated_at": utc_now()}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        updated = note.model_copy(update=changes)
        self._state.commit(notes=[updated if n.id == note_id else n for n in self._state.notes])
        return updated

    def delete_note(self, note_id: str) -> None:
        self.get(note_id)
        self._state.commit(notes=[n for n in self._state.notes if n.id != note_id])
        if self.active_note_id == note_id:
            self.active_note_id = None

    async def improve(self, note_id: str) -> Tuple[Note, AssistResult[str]]:
        """Rewrite the note content with the assistant; a fallback leaves the note as is."""
        note = self.get(note_id)
        if not note.content:
            return note, Ok(note.content)
        result = await asyncio.to_thread(self.assistant.improve_note, note.content)
        if isinstance(result, Ok):
            note = self.update_note(note_id, content=result.value)
        return note, result

    async def extract_tasks(self, note_id: str) -> Tuple[List[Task], AssistResult[List[str]]]:
        """Turn the actionable items of the note into to-do tasks."""
        note = self.get(note_id)
        if not note.content:
            return [], Ok([])
        result = await asyncio.to_thread(self.assistant.suggest_tasks, note.content)
        created = self._kanban.add_tasks(result.value)
        logger.info("Created %d tasks from note %s", len(created), note_id)
        return created, result
