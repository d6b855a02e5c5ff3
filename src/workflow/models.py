from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Monday..Friday
WORK_DAYS = (0, 1, 2, 3, 4)
MAX_DAILY_HOURS = 24.0
TARGET_DAILY_HOURS = 8.0


def new_id() -> str:
    """Return a new opaque identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """
    Base model for stored records.

    Field names are snake_case in Python and camelCase on the wire and in
    storage, which keeps backup files from older clients readable.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskStatus(str, Enum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"


# Kanban column order
STATUS_ORDER = (TaskStatus.TODO, TaskStatus.DOING, TaskStatus.DONE)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class View(str, Enum):
    TIMESHEET = "timesheet"
    KANBAN = "kanban"
    NOTEPAD = "notepad"
    SETTINGS = "settings"


# PUBLIC_INTERFACE
class Project(Record):
    """A project row of the timesheet grid."""

    id: str = Field(default_factory=new_id)
    name: str
    color: str


# PUBLIC_INTERFACE
class TimesheetEntry(Record):
    """
    Hours booked on a project, keyed by work-day index (0=Mon .. 4=Fri).
    JSON object keys arrive as strings and are coerced to int.
    """

    project_id: str
    hours: Dict[int, float] = Field(default_factory=lambda: {day: 0.0 for day in WORK_DAYS})

    def hours_on(self, day: int) -> float:
        return self.hours.get(day, 0.0)

    def total(self) -> float:
        return sum(self.hours_on(day) for day in WORK_DAYS)


# PUBLIC_INTERFACE
class Note(Record):
    id: str = Field(default_factory=new_id)
    title: str = ""
    content: str = ""
    updated_at: datetime = Field(default_factory=utc_now)


class ChecklistItem(Record):
    id: str = Field(default_factory=new_id)
    text: str
    done: bool = False


# PUBLIC_INTERFACE
class Task(Record):
    id: str = Field(default_factory=new_id)
    content: str
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    checklist: List[ChecklistItem] = Field(default_factory=list)


class DriveConfig(Record):
    """Credentials of the user's Google Cloud project."""

    api_key: str = ""
    client_id: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.api_key and self.client_id)


# PUBLIC_INTERFACE
class SyncSnapshot(Record):
    """
    Point-in-time copy of the four collections, as stored in the remote file.

    Collections are optional so that a partial backup can be loaded: a missing
    collection leaves the local one untouched.
    """

    projects: Optional[List[Project]] = None
    entries: Optional[List[TimesheetEntry]] = None
    notes: Optional[List[Note]] = None
    tasks: Optional[List[Task]] = None
    last_updated: Optional[datetime] = None

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def default_tasks() -> List[Task]:
    """Example tasks shown on a fresh install."""
    return [
        Task(
            id="1",
            content="Set up the development environment",
            status=TaskStatus.DONE,
            priority=Priority.HIGH,
        ),
        Task(
            id="2",
            content="Write the API documentation",
            status=TaskStatus.TODO,
            priority=Priority.MEDIUM,
            checklist=[ChecklistItem(id="c1", text="Login endpoint")],
        ),
    ]
