from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_workspace
from ..schemas import ViewIn, ViewOut
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/view",
    tags=["views"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=ViewOut, summary="Active view")
async def get_view(ws: Workspace = Depends(get_workspace)) -> ViewOut:
    return ViewOut(view=ws.active_view)


# PUBLIC_INTERFACE
@router.put("/", response_model=ViewOut, summary="Navigate to a view", description="One of timesheet, kanban, notepad, settings.")
async def set_view(payload: ViewIn, ws: Workspace = Depends(get_workspace)) -> ViewOut:
    return ViewOut(view=ws.show(payload.view))
