from __future__ import annotations

import time
from typing import Any

# Event types emitted by the session layer
SEARCH = "search"
REVIEW_SUBMITTED = "review_submitted"
REVIEW_DELETED = "review_deleted"
REVIEW_RESTORED = "review_restored"

_activity_log: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any], session_id: str | None = None) -> None:
    _activity_log.append({
        "type": event_type,
        "session_id": session_id,
        "timestamp": time.time(),
        **data,
    })


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    """All recorded activity, or only entries of ``event_type``."""
    if event_type is None:
        return _activity_log
    return [e for e in _activity_log if e["type"] == event_type]


def clear_events() -> None:
    _activity_log.clear()
