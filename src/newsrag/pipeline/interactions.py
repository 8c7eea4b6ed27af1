"""Interaction log sinks.

The pipeline treats the log as fire-and-forget: a failing sink is logged
and ignored, never surfaced to the caller.
"""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path

from newsrag.errors import LogFailure
from newsrag.pipeline.schemas import Interaction


class InteractionLog(ABC):
    """Append-only sink for completed query/response cycles."""

    @abstractmethod
    def record(self, interaction: Interaction) -> None:
        """Append one interaction."""


class MemoryInteractionLog(InteractionLog):
    def __init__(self) -> None:
        self.interactions: list[Interaction] = []
        self._lock = threading.Lock()

    def record(self, interaction: Interaction) -> None:
        with self._lock:
            self.interactions.append(interaction)


class JsonlInteractionLog(InteractionLog):
    """One JSON object per line, appended under a process-local lock."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def record(self, interaction: Interaction) -> None:
        line = json.dumps(asdict(interaction), ensure_ascii=False)
        try:
            with self._lock, open(self.path, "a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            raise LogFailure(f"Cannot append to {self.path}: {exc}") from exc
