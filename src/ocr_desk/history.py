from __future__ import annotations

import json
import logging

from .models import HistoryEntry
from .store import HISTORY_KEY, KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 10


class HistoryCache:
    """Bounded, most-recent-first list of past extractions.

    The collection lives in memory and is written back to ``store`` after
    every mutation, before the mutating call returns. A missing or corrupt
    stored value is treated as an empty history.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = HISTORY_KEY,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._store = store
        self._key = key
        self._capacity = capacity
        self._entries: list[HistoryEntry] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> list[HistoryEntry]:
        self._entries = self._read()[: self._capacity]
        return self.entries

    def _read(self) -> list[HistoryEntry]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse history (%s); starting empty", e)
            return []
        if not isinstance(data, list):
            logger.warning(
                "Stored history is a %s, not a list; starting empty",
                type(data).__name__,
            )
            return []
        try:
            return [HistoryEntry.from_dict(item) for item in data]
        except ValueError as e:
            logger.warning("Discarding malformed history: %s", e)
            return []

    def _persist(self) -> None:
        payload = [entry.to_dict() for entry in self._entries]
        self._store.set(self._key, json.dumps(payload, ensure_ascii=False))

    def insert(self, entry: HistoryEntry) -> list[HistoryEntry]:
        self._entries = [entry, *self._entries][: self._capacity]
        self._persist()
        logger.debug("History entry %s stored (%d total)", entry.id, len(self))
        return self.entries

    def remove(self, entry_id: int) -> list[HistoryEntry]:
        self._entries = [e for e in self._entries if e.id != entry_id]
        self._persist()
        return self.entries

    def clear(self) -> list[HistoryEntry]:
        self._entries = []
        self._store.remove(self._key)
        return self.entries

    def restore(self, entry_id: int) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None
