from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..assist import Fallback
from ..deps import get_workspace
from ..messages import MessageKind
from ..models import Note, View
from ..schemas import ActiveNoteIn, ExtractOut, ImproveOut, NoteUpdate
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/notes",
    tags=["notes"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=List[Note], summary="List notes", description="Most recently created first.")
async def list_notes(ws: Workspace = Depends(get_workspace)) -> List[Note]:
    return ws.state.notes


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Note,
    status_code=status.HTTP_201_CREATED,
    summary="Create note",
    description="Create an empty note and make it the active one.",
)
async def create_note(ws: Workspace = Depends(get_workspace)) -> Note:
    return ws.notepad.create_note()


# PUBLIC_INTERFACE
@router.get("/active", response_model=Optional[Note], summary="Active note")
async def get_active_note(ws: Workspace = Depends(get_workspace)) -> Optional[Note]:
    return ws.notepad.active_note


# PUBLIC_INTERFACE
@router.put("/active", response_model=Note, summary="Select active note", responses={404: {"description": "Note not found"}})
async def select_note(payload: ActiveNoteIn, ws: Workspace = Depends(get_workspace)) -> Note:
    return ws.notepad.select(payload.note_id)


# PUBLIC_INTERFACE
@router.get("/{note_id}", response_model=Note, summary="Get note", responses={404: {"description": "Note not found"}})
async def get_note(note_id: str, ws: Workspace = Depends(get_workspace)) -> Note:
    return ws.notepad.get(note_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{note_id}",
    response_model=Note,
    summary="Edit note",
    description="Update title and/or content; the modification time is refreshed.",
    responses={404: {"description": "Note not found"}},
)
async def update_note(note_id: str, payload: NoteUpdate, ws: Workspace = Depends(get_workspace)) -> Note:
    return ws.notepad.update_note(note_id, title=payload.title, content=payload.content)


# PUBLIC_INTERFACE
@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete note", responses={404: {"description": "Note not found"}})
async def delete_note(note_id: str, ws: Workspace = Depends(get_workspace)) -> None:
    ws.notepad.delete_note(note_id)
    return None


# PUBLIC_INTERFACE
@router.post(
    "/{note_id}/improve",
    response_model=ImproveOut,
    summary="Improve note with AI",
    description=(
        "Rewrite the note content with the AI assistant. When the assistant is unavailable the "
        "note is left unchanged and the outcome is 'fallback'."
    ),
)
async def improve_note(note_id: str, ws: Workspace = Depends(get_workspace)) -> ImproveOut:
    note, result = await ws.notepad.improve(note_id)
    reason = result.reason if isinstance(result, Fallback) else None
    return ImproveOut(note=note, outcome=result.outcome, reason=reason)


# PUBLIC_INTERFACE
@router.post(
    "/{note_id}/extract-tasks",
    response_model=ExtractOut,
    summary="Create tasks from note",
    description=(
        "Ask the AI assistant for the actionable items of the note and add each one to the "
        "kanban board as a todo task of medium priority. Switches the active view to kanban "
        "when tasks were created."
    ),
)
async def extract_tasks(note_id: str, ws: Workspace = Depends(get_workspace)) -> ExtractOut:
    created, result = await ws.notepad.extract_tasks(note_id)
    if created:
        ws.show(View.KANBAN)
        ws.messages.post(MessageKind.SUCCESS, f"{len(created)} tasks created on the Kanban board")
    else:
        ws.messages.post(MessageKind.INFO, "No tasks found in the text.")
    reason = result.reason if isinstance(result, Fallback) else None
    return ExtractOut(created=created, outcome=result.outcome, reason=reason, active_view=ws.active_view)
