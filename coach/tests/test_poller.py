import httpx
import pytest

from coach.logic.generation.poller import (
    Deliver,
    GenerationPoller,
    PollStatus,
    Schedule,
    Stop,
    TickResult,
    WorkoutPollSchedule,
    advance,
    begin_tick,
    estimate_progress,
    initial_state,
)
from coach.logic.generation.requester import GenerationJob, placeholder_job
from coach.utilities.errors import GatewayError, NetworkError, NotFoundError, PollExhaustedError
from coach.infra.Plan_Client import NutritionPlanClient
from coach.tests.factories import CURRENT, NOW, make_plan, mock_session, plan_payload


class ScriptedFetch:
    """Answers fetches from a list of outcomes; exceptions are raised, anything else returned."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.weeks = []

    async def __call__(self, week):
        self.weeks.append(week)
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _job(placeholder=False):
    if placeholder:
        return placeholder_job(CURRENT, NOW)
    return GenerationJob(job_id="plan-1", target_week=CURRENT, created_at=NOW)


def _poller(outcomes, max_attempts=30, **kwargs):
    fetch = ScriptedFetch(outcomes)
    sleep = RecordingSleep()
    ticks = []
    poller = GenerationPoller(fetch, kwargs.pop('job', _job()), max_attempts=max_attempts,
                              sleep=sleep, on_tick=ticks.append, **kwargs)
    return poller, fetch, sleep, ticks


def test_progress_estimate_bounds():
    assert estimate_progress(1, 30) == 20
    assert estimate_progress(30, 30) == 95
    assert estimate_progress(1, 1) == 20
    assert all(estimate_progress(k, 30) < 100 for k in range(1, 40))


def test_initial_state_requires_budget():
    with pytest.raises(ValueError):
        initial_state(0)


def test_advance_after_terminal_state_is_rejected():
    state = begin_tick(initial_state(1))
    state, effect = advance(state, TickResult(plan=None))
    assert state.status is PollStatus.TIMED_OUT
    assert isinstance(effect, Stop)
    with pytest.raises(ValueError):
        advance(state, TickResult(plan=None))


def test_advance_schedules_next_tick_while_budget_left():
    state = begin_tick(initial_state(3, interval_ms=5000))
    state, effect = advance(state, TickResult(error=NetworkError()))
    assert effect == Schedule(5000)
    assert state.status is PollStatus.PENDING
    assert isinstance(state.last_error, NetworkError)


def test_advance_ready_delivers_plan():
    plan = make_plan()
    state, effect = advance(begin_tick(initial_state(3)), TickResult(plan=plan))
    assert state.status is PollStatus.READY
    assert state.progress_pct == 100
    assert isinstance(effect, Deliver)
    assert effect.plan is plan


@pytest.mark.asyncio
async def test_ready_on_twentieth_tick():
    plan = make_plan()
    poller, fetch, sleep, ticks = _poller([None] * 19 + [plan], max_attempts=30)
    state = await poller.run()

    assert state.status is PollStatus.READY
    assert state.plan is plan
    assert state.progress_pct == 100
    assert len(fetch.weeks) == 20
    assert all(w == CURRENT for w in fetch.weeks)
    progress = [t.progress_pct for t in ticks]
    assert progress == sorted(progress)
    assert all(p < 100 for p in progress[:-1])
    assert progress[-1] == 100
    # 19 intervals, then the settle delay
    assert sleep.delays == [5.0] * 19 + [1.0]


@pytest.mark.asyncio
async def test_times_out_after_exactly_the_budget():
    poller, fetch, sleep, ticks = _poller([None] * 50, max_attempts=20)
    state = await poller.run()

    assert state.status is PollStatus.TIMED_OUT
    assert state.attempt == 20
    assert len(fetch.weeks) == 20
    assert state.progress_pct == 95
    assert max(t.progress_pct for t in ticks) == 95
    assert sleep.delays == [5.0] * 19


@pytest.mark.asyncio
async def test_empty_shell_is_not_treated_as_ready():
    poller, fetch, _, _ = _poller([make_plan(meals_per_day=0)] * 3, max_attempts=3)
    state = await poller.run()
    assert state.status is PollStatus.TIMED_OUT
    assert len(fetch.weeks) == 3


@pytest.mark.asyncio
async def test_errors_then_ready():
    plan = make_plan()
    poller, fetch, _, _ = _poller([NetworkError(), GatewayError(), plan], max_attempts=5)
    state = await poller.run()
    assert state.status is PollStatus.READY
    assert len(fetch.weeks) == 3


@pytest.mark.asyncio
async def test_error_on_last_tick_ends_errored():
    poller, _, _, ticks = _poller([None, NotFoundError(), httpx.ConnectError("refused")], max_attempts=3)
    state = await poller.run()

    assert state.status is PollStatus.ERRORED
    assert isinstance(state.last_error, PollExhaustedError)
    assert isinstance(state.last_error.cause, NetworkError)
    assert state.last_error.attempts == 3
    assert ticks[-1].status is PollStatus.ERRORED


@pytest.mark.asyncio
async def test_clean_last_tick_after_errors_times_out():
    poller, _, _, _ = _poller([NetworkError(), NetworkError(), None], max_attempts=3)
    state = await poller.run()
    assert state.status is PollStatus.TIMED_OUT
    assert state.last_error is None


@pytest.mark.asyncio
async def test_placeholder_head_start_shows_twenty_on_first_tick():
    poller, _, _, ticks = _poller([make_plan()], job=_job(placeholder=True))
    assert poller.state.progress_pct == 20
    await poller.run()
    assert ticks[0].attempt == 1
    assert ticks[0].progress_pct == 20


@pytest.mark.asyncio
async def test_workout_schedule_for_real_job():
    poller, _, sleep, _ = _poller([None, None, make_plan()], max_attempts=15, schedule=WorkoutPollSchedule())
    state = await poller.run()
    assert state.status is PollStatus.READY
    assert sleep.delays == [30.0, 5.0, 5.0, 1.0]


@pytest.mark.asyncio
async def test_workout_schedule_for_placeholder_job():
    poller, _, sleep, _ = _poller([None, None, make_plan()], max_attempts=15,
                                  schedule=WorkoutPollSchedule(), job=_job(placeholder=True))
    await poller.run()
    assert sleep.delays == [10.0, 10.0, 1.0]


@pytest.mark.asyncio
async def test_malformed_plan_bodies_are_retried():
    answers = [
        httpx.Response(200, json={"days": [{"meals": []}]}),
        httpx.Response(200, text="<html>half written</html>"),
        httpx.Response(200, json=plan_payload()),
    ]
    requests = []

    def handler(request):
        requests.append(request)
        return answers.pop(0)

    session = mock_session(handler)
    sleep = RecordingSleep()
    poller = GenerationPoller(NutritionPlanClient(session).fetch_plan, _job(), max_attempts=5, sleep=sleep)
    state = await poller.run()
    await session.aclose()

    assert state.status is PollStatus.READY
    assert state.attempt == 3
    assert len(requests) == 3
    assert state.plan.id == "plan-1"


@pytest.mark.asyncio
async def test_unexpected_fetch_failure_ends_errored():
    async def broken_fetch(week):
        raise RuntimeError("decoder bug")

    poller = GenerationPoller(broken_fetch, _job(), max_attempts=2, sleep=RecordingSleep())
    state = await poller.run()
    assert state.status is PollStatus.ERRORED
    assert isinstance(state.last_error, PollExhaustedError)
