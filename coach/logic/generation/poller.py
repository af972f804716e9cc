"""Bounded polling for a generation job.

The poll loop is a small state machine over ``PollState``:

    Pending(attempt, progress) --ready plan--------------> Ready(plan)
    Pending --not ready / fetch error, budget left-------> Pending(attempt + 1)
    Pending --not ready, budget spent--------------------> TimedOut
    Pending --fetch error, budget spent------------------> Errored(PollExhaustedError)

``begin_tick`` and ``advance`` are pure; ``GenerationPoller`` drives them with
an injected ``sleep`` coroutine so the attempt budget can be exercised
without real timers. Progress is a display estimate only: the backend
exposes no real progress.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from coach.domain.Week import WeekIdentifier
from coach.logic.generation.requester import GenerationJob
from coach.utilities.config import POLL_INTERVAL_MS, POLL_MAX_ATTEMPTS
from coach.utilities.constants import (
    PROGRESS_CAP,
    PROGRESS_DONE,
    PROGRESS_HEAD_START,
    PROGRESS_SPAN,
    SETTLE_DELAY_MS,
    WORKOUT_FIRST_CHECK_MS,
    WORKOUT_FOLLOWUP_MS,
    WORKOUT_PLACEHOLDER_MS,
)
from coach.utilities.errors import CoachError, PollExhaustedError
from coach.utilities.network import classify_failure

logger = logging.getLogger(__name__)

FetchPlan = Callable[[WeekIdentifier], Awaitable[Any]]
Sleep = Callable[[float], Awaitable[Any]]


class PollStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


TERMINAL = (PollStatus.READY, PollStatus.TIMED_OUT, PollStatus.ERRORED)


@dataclass(frozen=True)
class PollState:
    attempt: int
    max_attempts: int
    interval_ms: int
    progress_pct: float
    status: PollStatus = PollStatus.PENDING
    last_error: Optional[CoachError] = None
    plan: Any = None

    @property
    def done(self) -> bool:
        return self.status in TERMINAL


@dataclass(frozen=True)
class TickResult:
    plan: Any = None
    error: Optional[CoachError] = None


@dataclass(frozen=True)
class Deliver:
    plan: Any
    settle_ms: int = SETTLE_DELAY_MS


@dataclass(frozen=True)
class Schedule:
    delay_ms: int


@dataclass(frozen=True)
class Stop:
    reason: Optional[CoachError] = None


Effect = Union[Deliver, Schedule, Stop]


def default_ready(plan) -> bool:
    return plan is not None and plan.is_ready()


def estimate_progress(attempt: int, max_attempts: int) -> float:
    """Progress shown during tick ``attempt`` (1-based): 20 on the first tick, 95 on the last."""
    steps = max(max_attempts - 1, 1)
    return min(PROGRESS_HEAD_START + (attempt - 1) / steps * PROGRESS_SPAN, PROGRESS_CAP)


def initial_state(max_attempts: int = POLL_MAX_ATTEMPTS, interval_ms: int = POLL_INTERVAL_MS,
                  head_start_pct: float = 0) -> PollState:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    return PollState(attempt=0, max_attempts=max_attempts, interval_ms=interval_ms,
                     progress_pct=min(head_start_pct, PROGRESS_CAP))


def begin_tick(state: PollState) -> PollState:
    attempt = state.attempt + 1
    progress = max(state.progress_pct, estimate_progress(attempt, state.max_attempts))
    return replace(state, attempt=attempt, progress_pct=progress)


def advance(state: PollState, result: TickResult, ready: Callable[[Any], bool] = default_ready,
            next_delay_ms: Optional[int] = None) -> Tuple[PollState, Effect]:
    """Fold one fetch outcome into the state and say what happens next."""
    if state.done:
        raise ValueError(f"poll already finished with {state.status.value}")
    if result.error is None and ready(result.plan):
        return replace(state, status=PollStatus.READY, progress_pct=PROGRESS_DONE,
                       plan=result.plan, last_error=None), Deliver(result.plan)
    if state.attempt < state.max_attempts:
        delay = state.interval_ms if next_delay_ms is None else next_delay_ms
        return replace(state, last_error=result.error), Schedule(delay)
    if result.error is not None:
        reason = PollExhaustedError(state.attempt, result.error)
        return replace(state, status=PollStatus.ERRORED, last_error=reason), Stop(reason)
    return replace(state, status=PollStatus.TIMED_OUT, last_error=None), Stop()


class PollSchedule:
    """Constant interval between ticks, optional wait before the first one."""

    def __init__(self, interval_ms: int = POLL_INTERVAL_MS, first_delay_ms: int = 0):
        self.interval_ms = interval_ms
        self.first_delay_ms = first_delay_ms

    def initial_delay(self, job: GenerationJob) -> int:
        return self.first_delay_ms

    def delay_after(self, attempt: int, job: GenerationJob) -> int:
        return self.interval_ms


class WorkoutPollSchedule(PollSchedule):
    """Workout jobs take ~35 s: a real job is first checked after 30 s, then every 5 s.

    Placeholder jobs (start absorbed a gateway timeout) are checked right away
    and every 10 s.
    """

    def __init__(self):
        super().__init__(WORKOUT_FOLLOWUP_MS, WORKOUT_FIRST_CHECK_MS)

    def initial_delay(self, job: GenerationJob) -> int:
        return 0 if job.placeholder else self.first_delay_ms

    def delay_after(self, attempt: int, job: GenerationJob) -> int:
        return WORKOUT_PLACEHOLDER_MS if job.placeholder else self.interval_ms


class GenerationPoller:
    """Runs the poll state machine for one job as a sequential chain of ticks."""

    def __init__(self, fetch_plan: FetchPlan, job: GenerationJob,
                 max_attempts: int = POLL_MAX_ATTEMPTS, interval_ms: int = POLL_INTERVAL_MS,
                 schedule: Optional[PollSchedule] = None, sleep: Sleep = asyncio.sleep,
                 ready: Callable[[Any], bool] = default_ready,
                 on_tick: Optional[Callable[[PollState], None]] = None):
        self.fetch_plan = fetch_plan
        self.job = job
        self.schedule = schedule or PollSchedule(interval_ms)
        self.sleep = sleep
        self.ready = ready
        self.on_tick = on_tick
        self.state = initial_state(max_attempts, self.schedule.interval_ms, job.head_start_pct)

    def _notify(self):
        if self.on_tick is not None:
            self.on_tick(self.state)

    async def _fetch(self) -> TickResult:
        try:
            return TickResult(plan=await self.fetch_plan(self.job.target_week))
        except Exception as exc:
            error = classify_failure(exc)
            logger.info("Poll %s/%s for %s failed: %s", self.state.attempt, self.state.max_attempts,
                        self.job.target_week, error.message)
            return TickResult(error=error)

    async def run(self) -> PollState:
        first = self.schedule.initial_delay(self.job)
        if first:
            await self.sleep(first / 1000)
        while True:
            self.state = begin_tick(self.state)
            self._notify()
            result = await self._fetch()
            self.state, effect = advance(self.state, result, self.ready,
                                         self.schedule.delay_after(self.state.attempt, self.job))
            if isinstance(effect, Deliver):
                logger.info("Plan for %s ready after %s attempts", self.job.target_week, self.state.attempt)
                self._notify()
                await self.sleep(effect.settle_ms / 1000)
                return self.state
            if isinstance(effect, Schedule):
                await self.sleep(effect.delay_ms / 1000)
                continue
            logger.warning("Polling for %s stopped: %s", self.job.target_week, self.state.status.value)
            self._notify()
            return self.state


__all__ = [
    'PollStatus', 'PollState', 'TickResult', 'Deliver', 'Schedule', 'Stop',
    'estimate_progress', 'initial_state', 'begin_tick', 'advance',
    'PollSchedule', 'WorkoutPollSchedule', 'GenerationPoller',
]
