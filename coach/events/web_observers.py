"""Web-facing observers for generation events.

Subscribes to the GLOBAL_EVENT_BUS for every generation.* event and keeps a
lightweight in-memory ring buffer the HTTP layer exposes, so a screen can
poll progress with a cursor instead of holding a connection open.

Design:
  * Each event gets an auto-increment integer id (cursor); clients ask for
    events newer than the last id they saw.
  * A simple Lock guards the buffer (uvicorn may run handlers on worker
    threads; per-process state is fine for progress notifications).
  * MAX_EVENTS caps memory use.
  * Plans are not copied into the buffer; a ready event carries the plan id
    and the screen reads the plan from the session endpoint.
"""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import GLOBAL_EVENT_BUS, ALL_GENERATION_EVENTS

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat(),
        }
        if isinstance(payload, dict):
            for k in ('week', 'job_id', 'attempt', 'max_attempts', 'progress', 'status',
                      'placeholder', 'attempts', 'reason'):
                if k in payload:
                    evt[k] = payload[k]
            plan = payload.get('plan')
            if plan is not None:
                evt['plan_id'] = getattr(plan, 'id', None)
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in ALL_GENERATION_EVENTS:
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True


def stop():
    global _started
    for name in ALL_GENERATION_EVENTS:
        GLOBAL_EVENT_BUS.unsubscribe(name, _record)
    _started = False


def get_events(since: Optional[int] = None, week: Optional[str] = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive), optionally for one week only.

    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        data = list(_events) if since is None else [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    if week is not None:
        data = [e for e in data if e.get('week') == week]
    return {'events': data, 'next_cursor': next_cursor}


def clear():
    global _next_id
    with _lock:
        _events.clear()
        _next_id = 1


__all__ = ['start', 'stop', 'get_events', 'clear']
