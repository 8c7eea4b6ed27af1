"""Named component registry — lazy import plus a singleton cache.

Backs the embedding, vector store and LLM factories. Instances built
without constructor kwargs are cached per key; configured instances are
always fresh.
"""

from __future__ import annotations

import importlib
from typing import Generic, TypeVar

T = TypeVar("T")


class Registry(Generic[T]):
    """Registry of ``(key, module_path, class_name)`` entries."""

    def __init__(self, kind: str, entries: list[tuple[str, str, str]]):
        self.kind = kind
        self._entries = entries
        self._cache: dict[str, T] = {}

    def create(self, name: str, **kwargs) -> T:
        key = name.lower()

        if not kwargs and key in self._cache:
            return self._cache[key]

        for reg_key, module_path, cls_name in self._entries:
            if reg_key == key:
                mod = importlib.import_module(module_path)
                instance = getattr(mod, cls_name)(**kwargs)
                if not kwargs:
                    self._cache[key] = instance
                return instance

        raise ValueError(f"Unknown {self.kind} '{name}'. Available: {self.available()}")

    def available(self) -> list[str]:
        return [k for k, _, _ in self._entries]

    def clear(self) -> None:
        self._cache.clear()
