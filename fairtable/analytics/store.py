from __future__ import annotations

import time
from typing import Any

RESOLUTION_EVENT = "resolution"

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })


def get_events(
    event_type: str | None = None,
    room_id: str | None = None,
) -> list[dict[str, Any]]:
    """Recorded events, oldest first, optionally narrowed to one type or room."""
    return [
        e for e in _events
        if (event_type is None or e["type"] == event_type)
        and (room_id is None or e.get("room_id") == room_id)
    ]


def clear_events() -> None:
    _events.clear()
