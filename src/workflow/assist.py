"""
AI text assistance backed by the Gemini generateContent REST API.

Every operation returns either Ok(value) or Fallback(value, reason). A
Fallback carries a safe value (the original text, an empty list, a fixed
message) so that a failed call never changes data by accident, while still
letting the caller tell it apart from a real answer.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, Optional, TypeVar, Union

import requests

from .models import Task, TaskStatus

logger = logging.getLogger(__name__)

ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def outcome(self) -> str:
        return "ok"


@dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str

    @property
    def outcome(self) -> str:
        return "fallback"


AssistResult = Union[Ok[T], Fallback[T]]


class AssistError(Exception):
    """Raised by GeminiClient when no usable answer was obtained."""


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._session = session or requests.Session()

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        if not self.api_key:
            raise AssistError("GEMINI_API_KEY is not configured")
        payload: dict = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if json_mode:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        try:
            resp = self._session.post(
                ENDPOINT.format(model=self.model),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise AssistError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise AssistError("Gemini returned a non-JSON response") from exc
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AssistError("Gemini response has no candidates") from exc
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def _parse_string_list(text: str) -> Optional[List[str]]:
    """Parse a JSON array of strings, also when it is wrapped in prose."""
    candidates = [text.strip()]
    match = re.search(r"\[.*\]", text, re.DOTALL)
    if match:
        candidates.append(match.group())
    for candidate in candidates:
        try:
            parsed: Any = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, list) and all(isinstance(item, str) for item in parsed):
            return [item.strip() for item in parsed if item.strip()]
    return None


IMPROVE_PROMPT = """\
Act as an editorial assistant. Improve the following quickly-written note.
Fix the grammar, make it clearer and format it better where needed (markdown is allowed).
Keep the original meaning and language. Reply ONLY with the improved text.

Original note:
{text}
"""

SUGGEST_PROMPT = """\
Analyze the following notepad text and extract a list of possible tasks (actions to take).
Return ONLY a JSON array of strings, for example: ["Buy milk", "Email Mario"].
If there are no obvious tasks, return an empty array [].

Text:
{text}
"""

ANALYZE_PROMPT = """\
Act as an experienced and efficient project manager.
Analyze the following list of remaining tasks.

Give a short strategic report (3-4 sentences at most):
1. Identify bottlenecks and urgent items (high priority).
2. Suggest a logical execution order.
3. Keep a motivating but professional tone.

Tasks:
{summary}
"""

NOTHING_PENDING = "Great work! There are no pending tasks. Enjoy the rest!"
ANALYSIS_UNAVAILABLE = "Unable to analyze the tasks right now."
ANALYSIS_FAILED = "Error while contacting the AI assistant."


# PUBLIC_INTERFACE
class TextAssistant:
    """The AI operations used by the notepad and the kanban board."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    def improve_note(self, text: str) -> AssistResult[str]:
        """Rewrite text; falls back to the unchanged text."""
        if not text:
            return Ok("")
        try:
            improved = self.client.generate(IMPROVE_PROMPT.format(text=text)).strip()
        except AssistError as exc:
            logger.warning("Note rewrite degraded: %s", exc)
            return Fallback(text, str(exc))
        if not improved:
            return Fallback(text, "empty answer")
        return Ok(improved)

    def suggest_tasks(self, content: str) -> AssistResult[List[str]]:
        """Extract actionable items from content; falls back to []."""
        try:
            answer = self.client.generate(SUGGEST_PROMPT.format(text=content), json_mode=True)
        except AssistError as exc:
            logger.warning("Task extraction degraded: %s", exc)
            return Fallback([], str(exc))
        items = _parse_string_list(answer)
        if items is None:
            logger.warning("Task extraction returned an unexpected answer: %.200s", answer)
            return Fallback([], "answer is not a JSON array of strings")
        return Ok(items)

    def analyze_tasks(self, tasks: Iterable[Task]) -> AssistResult[str]:
        """Short report on the pending tasks."""
        pending = [t for t in tasks if t.status in (TaskStatus.TODO, TaskStatus.DOING)]
        if not pending:
            return Ok(NOTHING_PENDING)
        summary = "\n".join(
            f"- [{'IN PROGRESS' if t.status is TaskStatus.DOING else 'TO DO'}] "
            f"(Priority: {t.priority.value}): {t.content}"
            for t in pending
        )
        try:
            report = self.client.generate(ANALYZE_PROMPT.format(summary=summary)).strip()
        except AssistError as exc:
            logger.warning("Task analysis degraded: %s", exc)
            return Fallback(ANALYSIS_FAILED, str(exc))
        if not report:
            return Fallback(ANALYSIS_UNAVAILABLE, "empty answer")
        return Ok(report)
