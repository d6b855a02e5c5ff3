from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends, status

from ..deps import get_workspace
from ..models import ChecklistItem, Task
from ..schemas import (
    AnalysisOut,
    BoardColumn,
    ChecklistItemCreate,
    DraftUpdate,
    TaskCreate,
    TaskMove,
)
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/kanban",
    tags=["kanban"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=List[BoardColumn], summary="Board", description="Tasks grouped in todo, doing and done columns.")
async def get_board(ws: Workspace = Depends(get_workspace)) -> List[BoardColumn]:
    return [BoardColumn.model_validate(c) for c in ws.kanban.board()]


# PUBLIC_INTERFACE
@router.get("/tasks", response_model=List[Task], summary="List tasks")
async def list_tasks(ws: Workspace = Depends(get_workspace)) -> List[Task]:
    return ws.state.tasks


# PUBLIC_INTERFACE
@router.post(
    "/tasks",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
    description="New tasks start in the todo column with an empty checklist.",
)
async def create_task(payload: TaskCreate, ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.add_task(payload.content, payload.priority)


# PUBLIC_INTERFACE
@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete task",
    responses={404: {"description": "Task not found"}},
)
async def delete_task(task_id: str, ws: Workspace = Depends(get_workspace)) -> None:
    ws.kanban.delete_task(task_id)
    return None


# PUBLIC_INTERFACE
@router.post(
    "/tasks/{task_id}/move",
    response_model=Task,
    summary="Move task",
    description="Move a task one column left or right. Moving past the first or last column changes nothing.",
    responses={404: {"description": "Task not found"}},
)
async def move_task(task_id: str, payload: TaskMove, ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.move_task(task_id, payload.direction)


# PUBLIC_INTERFACE
@router.post("/analysis", response_model=AnalysisOut, summary="AI analysis of pending tasks")
async def analyze_tasks(ws: Workspace = Depends(get_workspace)) -> AnalysisOut:
    result = await asyncio.to_thread(ws.kanban.analyze)
    return AnalysisOut(report=result.value, outcome=result.outcome)


# Draft editing


# PUBLIC_INTERFACE
@router.post(
    "/tasks/{task_id}/draft",
    response_model=Task,
    summary="Start editing a task",
    description="Open a private copy of the task. Changes reach the board only on save.",
    responses={404: {"description": "Task not found"}},
)
async def begin_edit(task_id: str, ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.begin_edit(task_id)


# PUBLIC_INTERFACE
@router.get("/draft", response_model=Task, summary="Task being edited", responses={409: {"description": "No open draft"}})
async def get_draft(ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.current_draft()


# PUBLIC_INTERFACE
@router.patch("/draft", response_model=Task, summary="Edit content or priority of the draft")
async def update_draft(payload: DraftUpdate, ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.update_draft(content=payload.content, priority=payload.priority)


# PUBLIC_INTERFACE
@router.post(
    "/draft/checklist",
    response_model=ChecklistItem,
    status_code=status.HTTP_201_CREATED,
    summary="Add checklist item to the draft",
)
async def add_checklist_item(payload: ChecklistItemCreate, ws: Workspace = Depends(get_workspace)) -> ChecklistItem:
    return ws.kanban.add_checklist_item(payload.text)


# PUBLIC_INTERFACE
@router.post("/draft/checklist/{item_id}/toggle", response_model=ChecklistItem, summary="Toggle checklist item")
async def toggle_checklist_item(item_id: str, ws: Workspace = Depends(get_workspace)) -> ChecklistItem:
    return ws.kanban.toggle_checklist_item(item_id)


# PUBLIC_INTERFACE
@router.delete(
    "/draft/checklist/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove checklist item",
)
async def remove_checklist_item(item_id: str, ws: Workspace = Depends(get_workspace)) -> None:
    ws.kanban.remove_checklist_item(item_id)
    return None


# PUBLIC_INTERFACE
@router.post("/draft/save", response_model=Task, summary="Save the draft onto the board")
async def save_draft(ws: Workspace = Depends(get_workspace)) -> Task:
    return ws.kanban.save_draft()


# PUBLIC_INTERFACE
@router.delete("/draft", status_code=status.HTTP_204_NO_CONTENT, summary="Discard the draft")
async def discard_draft(ws: Workspace = Depends(get_workspace)) -> None:
    ws.kanban.discard_draft()
    return None
