from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .models import utc_now


class MessageKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class StatusMessage:
    kind: MessageKind
    text: str
    posted_at: datetime = field(default_factory=utc_now)


class MessageBoard:
    """Holds the latest user-facing message and dismisses it after a delay."""

    def __init__(self, display_seconds: float = 5.0) -> None:
        self.display_seconds = display_seconds
        self.current: Optional[StatusMessage] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._dismiss: Optional[asyncio.TimerHandle] = None

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def post(self, kind: MessageKind, text: str) -> StatusMessage:
        # Must be called on the event loop thread.
        message = StatusMessage(kind=kind, text=text)
        self.current = message
        if self._dismiss is not None:
            self._dismiss.cancel()
            self._dismiss = None
        if self._loop is not None:
            self._dismiss = self._loop.call_later(self.display_seconds, self.clear)
        return message

    def clear(self) -> None:
        self.current = None
        self._dismiss = None

    def close(self) -> None:
        if self._dismiss is not None:
            self._dismiss.cancel()
        self.clear()
