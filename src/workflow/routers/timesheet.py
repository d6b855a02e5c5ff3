from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, status

from ..deps import get_workspace
from ..schemas import HoursUpdate, ProjectCreate, ProjectTotal, TimesheetGrid
from ..models import Project, TimesheetEntry
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/timesheet",
    tags=["timesheet"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TimesheetGrid,
    summary="Weekly grid",
    description=(
        "Projects by work day (0=Mon .. 4=Fri) with daily totals. Each total is classified "
        "against the 8 hour target as empty, under, exact or over."
    ),
)
async def get_grid(ws: Workspace = Depends(get_workspace)) -> TimesheetGrid:
    return TimesheetGrid.model_validate(ws.timesheet.grid())


# PUBLIC_INTERFACE
@router.get(
    "/summary",
    response_model=List[ProjectTotal],
    summary="Weekly hours per project",
    description="Total hours of each project over the week; projects without hours are omitted.",
)
async def get_summary(ws: Workspace = Depends(get_workspace)) -> List[ProjectTotal]:
    return [ProjectTotal.model_validate(t) for t in ws.timesheet.project_totals()]


# PUBLIC_INTERFACE
@router.post(
    "/projects",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Add project",
    responses={201: {"description": "Project created with an empty row of hours"}},
)
async def add_project(payload: ProjectCreate, ws: Workspace = Depends(get_workspace)) -> Project:
    return ws.timesheet.add_project(payload.name)


# PUBLIC_INTERFACE
@router.delete(
    "/projects/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove project",
    description="Remove a project together with its hours.",
    responses={404: {"description": "Project not found"}},
)
async def remove_project(project_id: str, ws: Workspace = Depends(get_workspace)) -> None:
    ws.timesheet.remove_project(project_id)
    return None


# PUBLIC_INTERFACE
@router.delete(
    "/projects",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear week",
    description="Remove every project and all booked hours.",
)
async def clear_projects(ws: Workspace = Depends(get_workspace)) -> None:
    ws.timesheet.clear()
    return None


# PUBLIC_INTERFACE
@router.put(
    "/projects/{project_id}/hours/{day}",
    response_model=TimesheetEntry,
    summary="Set hours",
    description="Set the hours of a project on a work day. Non-numeric input counts as 0; values are clamped to [0, 24].",
    responses={404: {"description": "Project not found"}},
)
async def set_hours(
    payload: HoursUpdate,
    project_id: str,
    day: int = Path(..., ge=0, le=4, description="Work day index, 0=Monday .. 4=Friday"),
    ws: Workspace = Depends(get_workspace),
) -> TimesheetEntry:
    return ws.timesheet.set_hours(project_id, day, payload.value)
