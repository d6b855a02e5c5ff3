from __future__ import annotations

from typing import Any, Dict, List, Optional

from .assist import AssistResult, TextAssistant
from .errors import NoActiveDraftError, NotFoundError
from .models import STATUS_ORDER, ChecklistItem, Priority, Task, TaskStatus
from .state import AppState

LEFT = "left"
RIGHT = "right"


def next_status(status: TaskStatus, direction: str) -> TaskStatus:
    """One step along todo -> doing -> done; stepping past either end is a no-op."""
    index = STATUS_ORDER.index(status) + (1 if direction == RIGHT else -1)
    if index < 0 or index >= len(STATUS_ORDER):
        return status
    return STATUS_ORDER[index]


# PUBLIC_INTERFACE
class KanbanEditor:
    """
    Task board with three status columns.

    Content, priority and checklist are edited on a draft: a private copy of
    one task that replaces the stored task on save_draft() and is thrown away
    on discard_draft().
    """

    def __init__(self, state: AppState, assistant: TextAssistant) -> None:
        self._state = state
        self.assistant = assistant
        self.draft: Optional[Task] = None

    def _find(self, task_id: str) -> Task:
        for task in self._state.tasks:
            if task.id == task_id:
                return task
        raise NotFoundError("Task", task_id)

    def _replace(self, task: Task) -> None:
        self._state.commit(tasks=[task if t.id == task.id else t for t in self._state.tasks])

    def add_task(self, content: str, priority: Priority = Priority.MEDIUM) -> Task:
        task = Task(content=content.strip(), priority=priority)
        self._state.commit(tasks=self._state.tasks + [task])
        return task

    def add_tasks(self, contents: List[str]) -> List[Task]:
        """Append one to-do task of medium priority per content string."""
        created = [Task(content=c) for c in contents]
        if created:
            self._state.commit(tasks=self._state.tasks + created)
        return created

    def move_task(self, task_id: str, direction: str) -> Task:
        task = self._find(task_id)
        status = next_status(task.status, direction)
        if status is task.status:
            return task
        moved = task.model_copy(update={"status": status})
        self._replace(moved)
        return moved

    def delete_task(self, task_id: str) -> None:
        self._find(task_id)
        self._state.commit(tasks=[t for t in self._state.tasks if t.id != task_id])
        if self.draft is not None and self.draft.id == task_id:
            self.draft = None

    def board(self) -> List[Dict[str, Any]]:
        tasks = self._state.tasks
        columns = []
        for status in STATUS_ORDER:
            column = [t for t in tasks if t.status is status]
            columns.append(
                {
                    "status": status,
                    "count": len(column),
                    "tasks": [
                        {
                            "task": t,
                            "checklist_done": sum(1 for i in t.checklist if i.done),
                            "checklist_total": len(t.checklist),
                        }
                        for t in column
                    ],
                }
            )
        return columns

    def analyze(self) -> AssistResult[str]:
        return self.assistant.analyze_tasks(self._state.tasks)

    # Draft editing

    def begin_edit(self, task_id: str) -> Task:
        self.draft = self._find(task_id).model_copy(deep=True)
        return self.draft

    def current_draft(self) -> Task:
        if self.draft is None:
            raise NoActiveDraftError()
        return self.draft

    def update_draft(self, content: Optional[str] = None, priority: Optional[Priority] = None) -> Task:
        draft = self.current_draft()
        changes: Dict[str, Any] = {}
        if content is not None:
            changes["content"] = content
        if priority is not None:
            changes["priority"] = priority
        self.draft = draft.model_copy(update=changes)
        return self.draft

    def add_checklist_item(self, text: str) -> ChecklistItem:
        draft = self.current_draft()
        item = ChecklistItem(text=text.strip())
        self.draft = draft.model_copy(update={"checklist": draft.checklist + [item]})
        return item

    def toggle_checklist_item(self, item_id: str) -> ChecklistItem:
        draft = self.current_draft()
        toggled = None
        checklist = []
        for item in draft.checklist:
            if item.id == item_id:
                item = item.model_copy(update={"done": not item.done})
                toggled = item
            checklist.append(item)
        if toggled is None:
            raise NotFoundError("Checklist item", item_id)
        self.draft = draft.model_copy(update={"checklist": checklist})
        return toggled

    def remove_checklist_item(self, item_id: str) -> None:
        draft = self.current_draft()
        checklist = [i for i in draft.checklist if i.id != item_id]
        if len(checklist) == len(draft.checklist):
            raise NotFoundError("Checklist item", item_id)
        self.draft = draft.model_copy(update={"checklist": checklist})

    def save_draft(self) -> Task:
        """Apply the draft's content, priority and checklist to the stored task."""
        draft = self.current_draft()
        saved = self._find(draft.id).model_copy(
            update={"content": draft.content, "priority": draft.priority, "checklist": draft.checklist}
        )
        self._replace(saved)
        self.draft = None
        return saved

    def discard_draft(self) -> None:
        self.draft = None
