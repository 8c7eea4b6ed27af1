"""Live session channel contract.

The pipeline only publishes; subscription and transport belong to the
host application. A channel instance is passed into the pipeline per call.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ChatEvent(StrEnum):
    """Event names published to a session."""

    USER_MESSAGE = "user-message"
    BOT_TYPING = "bot-typing"
    BOT_MESSAGE = "bot-message"
    MESSAGE_CHUNK = "message-chunk"
    MESSAGE_ERROR = "message-error"


class SessionChannel(ABC):
    """Publishes events to the subscribers of one session.

    Events published for the same session must be delivered in publish order.
    """

    @abstractmethod
    def publish(self, session_id: str, event: ChatEvent, payload: dict[str, Any]) -> None:
        """Deliver ``payload`` as ``event`` to ``session_id``."""


@dataclass(frozen=True)
class PublishedEvent:
    session_id: str
    event: ChatEvent
    payload: dict[str, Any]


class MemorySessionChannel(SessionChannel):
    """Records every published event; useful for tests and local runs."""

    def __init__(self) -> None:
        self._events: list[PublishedEvent] = []
        self._lock = threading.Lock()

    def publish(self, session_id: str, event: ChatEvent, payload: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(PublishedEvent(session_id, event, payload))

    def events(
        self,
        session_id: str | None = None,
        event: ChatEvent | None = None,
    ) -> list[PublishedEvent]:
        with self._lock:
            return [
                e for e in self._events
                if (session_id is None or e.session_id == session_id)
                and (event is None or e.event == event)
            ]
