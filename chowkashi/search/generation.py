from __future__ import annotations

from collections import OrderedDict

# Least recently searching sessions are forgotten past this many
MAX_KEYS = 10_000


class GenerationTracker:
    """Per-key request counter: only the newest request may publish its result."""

    def __init__(self, max_keys: int = MAX_KEYS) -> None:
        self._current: OrderedDict[str, int] = OrderedDict()
        self._max_keys = max_keys

    def begin(self, key: str) -> int:
        generation = self._current.get(key, 0) + 1
        self._current[key] = generation
        self._current.move_to_end(key)
        while len(self._current) > self._max_keys:
            self._current.popitem(last=False)
        return generation

    def is_current(self, key: str, generation: int) -> bool:
        return self._current.get(key) == generation
