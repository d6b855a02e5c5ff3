from __future__ import annotations

import math
import random
from typing import Any, Dict, List

from .errors import NotFoundError
from .models import (
    MAX_DAILY_HOURS,
    TARGET_DAILY_HOURS,
    WORK_DAYS,
    Project,
    TimesheetEntry,
)
from .state import AppState


def coerce_hours(value: Any) -> float:
    """
    Turn user input into an hour value: anything non-numeric becomes 0 and
    the result is clamped to [0, 24]. Parsing is strict, so trailing text
    such as "7.5h" counts as non-numeric.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(MAX_DAILY_HOURS, max(0.0, number))


def classify_total(total: float) -> str:
    """Compare a daily total with the 8 hour target (display only)."""
    if total == 0:
        return "empty"
    if total < TARGET_DAILY_HOURS:
        return "under"
    if total > TARGET_DAILY_HOURS:
        return "over"
    return "exact"


def random_color() -> str:
    return f"hsl({random.uniform(0, 360):.0f}, 70%, 50%)"


def reconcile_entries(projects: List[Project], entries: List[TimesheetEntry]) -> List[TimesheetEntry]:
    """
    Return exactly one entry per project: the first existing entry of each
    project is kept, projects lacking one get a zero-filled entry, entries of
    unknown projects and duplicates are dropped.
    """
    project_ids = {p.id for p in projects}
    kept: Dict[str, TimesheetEntry] = {}
    for entry in entries:
        if entry.project_id in project_ids and entry.project_id not in kept:
            kept[entry.project_id] = entry
    missing = [TimesheetEntry(project_id=p.id) for p in projects if p.id not in kept]
    return list(kept.values()) + missing


# PUBLIC_INTERFACE
class TimesheetEditor:
    """Weekly grid of projects by work day."""

    def __init__(self, state: AppState) -> None:
        self._state = state

    def reconcile(self) -> List[TimesheetEntry]:
        entries = self._state.entries
        reconciled = reconcile_entries(self._state.projects, entries)
        if reconciled != entries:
            self._state.commit(entries=reconciled)
        return reconciled

    def add_project(self, name: str) -> Project:
        project = Project(name=name.strip(), color=random_color())
        self._state.commit(projects=self._state.projects + [project])
        self.reconcile()
        return project

    def remove_project(self, project_id: str) -> None:
        projects = self._state.projects
        if not any(p.id == project_id for p in projects):
            raise NotFoundError("Project", project_id)
        self._state.commit(
            projects=[p for p in projects if p.id != project_id],
            entries=[e for e in self._state.entries if e.project_id != project_id],
        )

    def clear(self) -> None:
        """Remove every project together with its hours."""
        self._state.commit(projects=[], entries=[])

    def set_hours(self, project_id: str, day: int, value: Any) -> TimesheetEntry:
        if not any(p.id == project_id for p in self._state.projects):
            raise NotFoundError("Project", project_id)
        if day not in WORK_DAYS:
            raise ValueError(f"day must be one of {list(WORK_DAYS)}")
        hours = coerce_hours(value)
        updated = None
        entries = []
        for entry in self.reconcile():
            if entry.project_id == project_id:
                entry = entry.model_copy(update={"hours": {**entry.hours, day: hours}})
                updated = entry
            entries.append(entry)
        self._state.commit(entries=entries)
        return updated

    def daily_totals(self) -> List[float]:
        entries = self._state.entries
        return [sum(e.hours_on(day) for e in entries) for day in WORK_DAYS]

    def grid(self) -> Dict[str, Any]:
        entries = {e.project_id: e for e in self.reconcile()}
        rows = [
            {"project": p, "hours": [entries[p.id].hours_on(day) for day in WORK_DAYS]}
            for p in self._state.projects
        ]
        totals = [
            {"day": day, "hours": total, "level": classify_total(total)}
            for day, total in zip(WORK_DAYS, self.daily_totals())
        ]
        return {"rows": rows, "totals": totals}

    def project_totals(self) -> List[Dict[str, Any]]:
        """Weekly hours per project, omitting projects without hours."""
        entries = {e.project_id: e for e in self._state.entries}
        totals = []
        for p in self._state.projects:
            entry = entries.get(p.id)
            hours = entry.total() if entry else 0.0
            if hours > 0:
                totals.append({"project_id": p.id, "name": p.name, "hours": hours, "color": p.color})
        return totals
