"""Simple Event Bus / Observer implementation for plan generation progress.

Event names:
  generation.started   -> payload {"week": str, "job_id": str, "placeholder": bool, "progress": float}
  generation.tick      -> payload {"week": str, "job_id": str, "attempt": int, "max_attempts": int, "progress": float, "status": str}
  generation.ready     -> payload {"week": str, "job_id": str, "plan": Plan | WorkoutPlan}
  generation.timed_out -> payload {"week": str, "job_id": str, "attempts": int}
  generation.error     -> payload {"week": str, "job_id": str, "reason": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
GENERATION_STARTED = "generation.started"
GENERATION_TICK = "generation.tick"
GENERATION_READY = "generation.ready"
GENERATION_TIMED_OUT = "generation.timed_out"
GENERATION_ERROR = "generation.error"

ALL_GENERATION_EVENTS = (
    GENERATION_STARTED, GENERATION_TICK, GENERATION_READY, GENERATION_TIMED_OUT, GENERATION_ERROR,
)


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        try:
            self._subscribers[event_name].remove(callback)
        except (ValueError, KeyError):
            pass

    def publish(self, event_name: str, payload: Any):
        for cb in list(self._subscribers.get(event_name, [])):
            try:
                cb(event_name, payload)
            except Exception:
                logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def publish(event_name: str, payload: Any = None) -> None:
    """Publish an event on the global bus."""
    GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
    'EventBus', 'GLOBAL_EVENT_BUS', 'publish',
    'GENERATION_STARTED', 'GENERATION_TICK', 'GENERATION_READY',
    'GENERATION_TIMED_OUT', 'GENERATION_ERROR', 'ALL_GENERATION_EVENTS',
]
