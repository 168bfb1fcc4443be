from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from typing import Any

from .config import DEFAULT_SESSION_CONFIG, SessionConfig
from .facade import ShopSession

logger = logging.getLogger(__name__)

# Least recently used first; values are (session, last access time)
_sessions: OrderedDict[str, tuple[ShopSession, float]] = OrderedDict()


def new_session_id() -> str:
    return uuid.uuid4().hex


def _evict_idle(now: float, idle_seconds: float) -> None:
    while _sessions:
        session_id, (session, last_seen) = next(iter(_sessions.items()))
        if now - last_seen < idle_seconds:
            break
        del _sessions[session_id]
        session.close()
        logger.info("Expired idle session %s", session_id)


def get_or_create_session(
    session_id: str,
    config: SessionConfig | None = None,
    now: float | None = None,
) -> ShopSession:
    """
    Return the live session for ``session_id``, creating it on first use.

    Sessions idle for longer than ``session_idle_seconds`` are closed first.
    When a new session pushes the count past ``max_sessions`` the least
    recently used ones are closed to make room.
    """
    config = config or DEFAULT_SESSION_CONFIG
    now = time.monotonic() if now is None else now
    _evict_idle(now, config.session_idle_seconds)

    entry = _sessions.get(session_id)
    if entry is not None:
        session = entry[0]
        _sessions[session_id] = (session, now)
        _sessions.move_to_end(session_id)
        return session

    session = ShopSession(config=config, session_id=session_id)
    _sessions[session_id] = (session, now)
    logger.debug("Started session %s", session_id)

    while len(_sessions) > max(config.max_sessions, 1):
        evicted_id, (evicted, _) = _sessions.popitem(last=False)
        evicted.close()
        logger.info("Evicted least recently used session %s", evicted_id)
    return session


def drop_session(session_id: str) -> dict[str, list[dict[str, Any]]]:
    """Close and forget a session, returning its overlay snapshot."""
    entry = _sessions.pop(session_id, None)
    if entry is None:
        return {}
    return entry[0].close()


def active_session_count() -> int:
    return len(_sessions)


def clear_sessions() -> None:
    for session, _ in _sessions.values():
        session.close()
    _sessions.clear()
