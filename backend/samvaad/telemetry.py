"""In-process telemetry for background analysis and persistence outcomes.

Events are fanned out to registered listeners and kept in a short ring
buffer so health checks and tests can observe failures that happen off the
request path.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger("samvaad.telemetry")

MAX_RECENT_EVENTS = 200


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


_listeners: List[Callable[[TelemetryEvent], None]] = []
_recent: Deque[TelemetryEvent] = deque(maxlen=MAX_RECENT_EVENTS)
_lock = RLock()


def register_listener(listener: Callable[[TelemetryEvent], None]) -> None:
    with _lock:
        _listeners.append(listener)


def unregister_listener(listener: Callable[[TelemetryEvent], None]) -> None:
    with _lock:
        if listener in _listeners:
            _listeners.remove(listener)


def clear_listeners() -> None:
    """Remove listeners and drop buffered events. Mainly used to reset test state."""
    with _lock:
        _listeners.clear()
        _recent.clear()


def recent_events(name: Optional[str] = None) -> List[TelemetryEvent]:
    """Return buffered events, oldest first, optionally filtered by name."""
    with _lock:
        events = list(_recent)
    if name is None:
        return events
    return [event for event in events if event.name == name]


def emit_event(name: str, **fields: Any) -> None:
    """Emit a structured telemetry event and fan it out to listeners."""
    event = TelemetryEvent(name=name, payload=_sanitize(fields))

    with _lock:
        _recent.append(event)
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    structured = {"event": name, **event.payload}
    logger.info("TELEMETRY %s", json.dumps(structured, default=_json_default))


def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            sanitized[key] = value.isoformat()
        elif isinstance(value, BaseException):
            sanitized[key] = f"{type(value).__name__}: {value}"
        else:
            sanitized[key] = value
    return sanitized


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


__all__ = [
    "TelemetryEvent",
    "clear_listeners",
    "emit_event",
    "recent_events",
    "register_listener",
    "unregister_listener",
]
