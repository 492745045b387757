"""
In-process store used by tests and as the default backend.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from flashcards.store.base import FlashcardStore


class MemoryStore(FlashcardStore):
    """Dict-backed store. Values are deep-copied in and out."""

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __repr__(self):
        return f"<MemoryStore({self.namespace}, keys={sorted(self._data)})>"
