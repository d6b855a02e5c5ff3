from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import Field, field_validator

from .messages import MessageKind
from .models import Note, Priority, Project, Record, Task, TaskStatus, View
from .sync import SyncStatus


def _strip_required(value: str, field: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError(f"{field} must not be blank")
    return s


# Timesheet


# PUBLIC_INTERFACE
class ProjectCreate(Record):
    """Schema for adding a project row to the timesheet."""

    name: str = Field(..., description="Display name of the project", min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "name")


class HoursUpdate(Record):
    """
    Hours for one project on one day. Any value is accepted: non-numeric input
    counts as 0 and numbers are clamped to [0, 24].
    """

    value: Union[float, str, None] = Field(default=None, description="Hours worked, e.g. 7.5")


class GridRow(Record):
    project: Project
    hours: List[float]


class DayTotal(Record):
    day: int
    hours: float
    level: Literal["empty", "under", "exact", "over"]


class TimesheetGrid(Record):
    rows: List[GridRow]
    totals: List[DayTotal]


class ProjectTotal(Record):
    project_id: str
    name: str
    hours: float
    color: str


# Kanban


# PUBLIC_INTERFACE
class TaskCreate(Record):
    content: str = Field(..., description="What needs to be done", min_length=1)
    priority: Priority = Field(default=Priority.MEDIUM, description="low, medium or high")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_required(v, "content")


class TaskMove(Record):
    direction: Literal["left", "right"]


class DraftUpdate(Record):
    """Partial update of the task being edited."""

    content: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[Priority] = None


class ChecklistItemCreate(Record):
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _strip_required(v, "text")


class BoardCard(Record):
    task: Task
    checklist_done: int
    checklist_total: int


class BoardColumn(Record):
    status: TaskStatus
    count: int
    tasks: List[BoardCard]


class AnalysisOut(Record):
    report: str
    outcome: Literal["ok", "fallback"]


# Notepad


class NoteUpdate(Record):
    title: Optional[str] = None
    content: Optional[str] = None


class ActiveNoteIn(Record):
    note_id: str


class ImproveOut(Record):
    note: Note
    outcome: Literal["ok", "fallback"]
    reason: Optional[str] = None


class ExtractOut(Record):
    created: List[Task]
    outcome: Literal["ok", "fallback"]
    reason: Optional[str] = None
    active_view: View


# Settings & sync


class DriveConfigIn(Record):
    api_key: str = Field(default="", description="Google Cloud API key")
    client_id: str = Field(default="", description="OAuth client id")


class AutosaveIn(Record):
    enabled: bool


class SessionIn(Record):
    access_token: str = Field(..., min_length=1, description="OAuth access token obtained by the browser")


class SettingsOut(Record):
    client_id: str
    has_api_key: bool
    autosave_enabled: bool
    drive_ready: bool
    signed_in: bool
    file_name: str


class MessageOut(Record):
    kind: MessageKind
    text: str
    posted_at: datetime


class SyncStatusOut(Record):
    status: SyncStatus
    pending: bool
    autosave_enabled: bool
    drive_ready: bool
    signed_in: bool
    revision: Optional[str] = None
    last_error: Optional[str] = None
    last_saved_at: Optional[datetime] = None
    message: Optional[MessageOut] = None


class SaveOut(Record):
    saved_at: datetime
    revision: Optional[str] = None


class LoadOut(Record):
    found: bool
    collections: List[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = None


class ViewIn(Record):
    view: View


class ViewOut(Record):
    view: View
