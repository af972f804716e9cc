"""Event helper utilities.

Publishing helpers for generation events. Each helper takes the bus to use
so independent orchestrators (and tests) can keep their own.

Quick import:
    from coach.events.event_helpers import (
        publish_started, publish_tick, publish_ready, publish_timed_out, publish_error
    )
"""
from __future__ import annotations
from typing import Any
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    GENERATION_STARTED, GENERATION_TICK, GENERATION_READY, GENERATION_TIMED_OUT, GENERATION_ERROR,
)

__all__ = [
    'publish_started', 'publish_tick', 'publish_ready', 'publish_timed_out', 'publish_error',
]


def publish_started(job: Any, bus: EventBus = GLOBAL_EVENT_BUS):
    """Publish a generation.started event for a freshly requested job."""
    bus.publish(GENERATION_STARTED, {
        'week': str(job.target_week),
        'job_id': job.job_id,
        'placeholder': job.placeholder,
        'progress': job.head_start_pct,
    })


def publish_tick(job: Any, state: Any, bus: EventBus = GLOBAL_EVENT_BUS):
    """Publish a generation.tick event with the current progress estimate."""
    bus.publish(GENERATION_TICK, {
        'week': str(job.target_week),
        'job_id': job.job_id,
        'attempt': state.attempt,
        'max_attempts': state.max_attempts,
        'progress': state.progress_pct,
        'status': state.status.value,
    })


def publish_ready(job: Any, plan: Any, bus: EventBus = GLOBAL_EVENT_BUS):
    bus.publish(GENERATION_READY, {
        'week': str(job.target_week),
        'job_id': job.job_id,
        'plan': plan,
    })


def publish_timed_out(job: Any, attempts: int, bus: EventBus = GLOBAL_EVENT_BUS):
    bus.publish(GENERATION_TIMED_OUT, {
        'week': str(job.target_week),
        'job_id': job.job_id,
        'attempts': attempts,
    })


def publish_error(job: Any, reason: str, bus: EventBus = GLOBAL_EVENT_BUS):
    bus.publish(GENERATION_ERROR, {
        'week': str(job.target_week),
        'job_id': job.job_id,
        'reason': reason,
    })
