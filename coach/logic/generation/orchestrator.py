"""request_generation: start a job, poll it in the background, report to subscribers.

Subscribers get ``on_tick(progress_pct, status)`` for every tick,
``on_ready(plan)``, ``on_timed_out()`` or ``on_error(reason)`` once at the
end. The same transitions go out on the event bus. Overlapping generations
(same or different weeks) run as independent tasks; nothing cancels a
running poller unless the caller asks through ``GenerationHandle.cancel``.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Union

from coach.domain.Week import WeekIdentifier, coerce_week
from coach.events.Event_Bus import GLOBAL_EVENT_BUS, EventBus
from coach.events.event_helpers import (
    publish_error,
    publish_ready,
    publish_started,
    publish_tick,
    publish_timed_out,
)
from coach.logic.generation.poller import (
    FetchPlan,
    GenerationPoller,
    PollSchedule,
    PollState,
    PollStatus,
    Sleep,
    WorkoutPollSchedule,
    default_ready,
)
from coach.logic.generation.requester import GenerationJob, PlanGenerationRequester, StartCall
from coach.utilities.config import POLL_INTERVAL_MS, POLL_MAX_ATTEMPTS, WORKOUT_POLL_MAX_ATTEMPTS

logger = logging.getLogger(__name__)


def _call_safely(callback: Optional[Callable], *args):
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.exception("Generation subscriber %r failed", callback)


class GenerationHandle:
    """A running (or finished) generation for one week."""

    def __init__(self, job: GenerationJob, poller: GenerationPoller, bus: EventBus,
                 on_tick=None, on_ready=None, on_timed_out=None, on_error=None):
        self.job = job
        self.week = job.target_week
        self._poller = poller
        self._bus = bus
        self._on_tick = on_tick
        self._on_ready = on_ready
        self._on_timed_out = on_timed_out
        self._on_error = on_error
        poller.on_tick = self._tick
        self.task: Optional[asyncio.Task] = None

    @property
    def state(self) -> PollState:
        return self._poller.state

    def _tick(self, state: PollState):
        _call_safely(self._on_tick, state.progress_pct, state.status)
        publish_tick(self.job, state, self._bus)

    async def _run(self) -> PollState:
        state = await self._poller.run()
        if state.status is PollStatus.READY:
            _call_safely(self._on_ready, state.plan)
            publish_ready(self.job, state.plan, self._bus)
        elif state.status is PollStatus.TIMED_OUT:
            _call_safely(self._on_timed_out)
            publish_timed_out(self.job, state.attempt, self._bus)
        else:
            reason = state.last_error.message if state.last_error else "unknown error"
            _call_safely(self._on_error, reason)
            publish_error(self.job, reason, self._bus)
        return state

    def start(self) -> GenerationHandle:
        self.task = asyncio.create_task(self._run(), name=f"poll-{self.week}")
        return self

    def done(self) -> bool:
        return self.task is not None and self.task.done()

    async def wait(self) -> PollState:
        return await self.task

    def cancel(self) -> bool:
        """Stop polling. Only explicit calls cancel; new generations never do."""
        if self.task is None or self.task.done():
            return False
        logger.info("Cancelling generation poll for %s", self.week)
        return self.task.cancel()


class GenerationOrchestrator:
    def __init__(self, start_call: StartCall, fetch_plan: FetchPlan, *,
                 max_attempts: int = POLL_MAX_ATTEMPTS, schedule: Optional[PollSchedule] = None,
                 sleep: Sleep = asyncio.sleep, ready: Callable[[Any], bool] = default_ready,
                 bus: EventBus = GLOBAL_EVENT_BUS, clock: Callable[[], datetime] = datetime.now):
        self.requester = PlanGenerationRequester(start_call, clock=clock)
        self.fetch_plan = fetch_plan
        self.max_attempts = max_attempts
        self.schedule = schedule or PollSchedule(POLL_INTERVAL_MS)
        self.sleep = sleep
        self.ready = ready
        self.bus = bus
        self.clock = clock

    async def request_generation(self, week: Union[WeekIdentifier, str, None] = None, *,
                                 on_tick=None, on_ready=None, on_timed_out=None, on_error=None) -> GenerationHandle:
        """Start generation for ``week`` and poll in the background.

        Raises GenerationStartError when the start call fails fatally; in that
        case no polling happens.
        """
        job = await self.requester.start(week)
        publish_started(job, self.bus)
        poller = GenerationPoller(self.fetch_plan, job, max_attempts=self.max_attempts,
                                  schedule=self.schedule, sleep=self.sleep, ready=self.ready)
        handle = GenerationHandle(job, poller, self.bus, on_tick=on_tick, on_ready=on_ready,
                                  on_timed_out=on_timed_out, on_error=on_error)
        return handle.start()

    async def refresh(self, week: Union[WeekIdentifier, str, None] = None):
        """Manual one-shot re-fetch after TimedOut / Errored; errors propagate."""
        return await self.fetch_plan(coerce_week(week, self.clock()))


def nutrition_orchestrator(client, **kwargs) -> GenerationOrchestrator:
    """Orchestrator over a NutritionPlanClient."""
    return GenerationOrchestrator(client.start_generation, client.fetch_plan, **kwargs)


def workout_orchestrator(client, days_available: int, goal: str, **kwargs) -> GenerationOrchestrator:
    """Orchestrator over a WorkoutPlanClient, bound to one request's parameters."""
    async def start_call(week: WeekIdentifier):
        return await client.start_generation(week, days_available, goal)

    kwargs.setdefault('max_attempts', WORKOUT_POLL_MAX_ATTEMPTS)
    kwargs.setdefault('schedule', WorkoutPollSchedule())
    return GenerationOrchestrator(start_call, client.fetch_plan, **kwargs)


__all__ = ['GenerationHandle', 'GenerationOrchestrator', 'nutrition_orchestrator', 'workout_orchestrator']
