from __future__ import annotations

import time
from typing import Any

# Oldest events are dropped past this many
MAX_EVENTS = 10_000

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })
    if len(_events) > MAX_EVENTS:
        del _events[: len(_events) - MAX_EVENTS]


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    if event_type is None:
        return _events
    return [e for e in _events if e["type"] == event_type]


def clear_events() -> None:
    _events.clear()
