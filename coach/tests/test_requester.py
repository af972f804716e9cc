import httpx
import pytest

from coach.infra.Plan_Client import NutritionPlanClient
from coach.logic.generation.requester import PlanGenerationRequester
from coach.utilities.errors import (
    BackendError,
    ClientTimeoutError,
    GatewayError,
    GenerationStartError,
    NetworkError,
)
from coach.utilities.validators import GenerationAccepted
from coach.tests.factories import CURRENT, NOW, clock, mock_session


def _start_call(answer):
    calls = []

    async def start_call(week):
        calls.append(week)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    return start_call, calls


@pytest.mark.asyncio
async def test_accepted_job():
    start_call, calls = _start_call(GenerationAccepted(planId="plan-9", created=True))
    job = await PlanGenerationRequester(start_call, clock=clock).start(CURRENT)
    assert calls == [CURRENT]
    assert job.job_id == "plan-9"
    assert job.placeholder is False
    assert job.already_existed is False
    assert job.head_start_pct == 10
    assert job.created_at == NOW


@pytest.mark.asyncio
async def test_existing_plan_is_flagged():
    start_call, _ = _start_call(GenerationAccepted(planId="plan-9", created=False))
    job = await PlanGenerationRequester(start_call, clock=clock).start(CURRENT)
    assert job.already_existed is True


@pytest.mark.asyncio
async def test_defaults_to_current_week():
    start_call, calls = _start_call(GenerationAccepted(planId="plan-9", created=True))
    job = await PlanGenerationRequester(start_call, clock=clock).start()
    assert job.target_week == CURRENT
    assert calls == [CURRENT]


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [
    GatewayError(),
    ClientTimeoutError(),
    NetworkError(),
    httpx.ReadTimeout("slow"),
    httpx.ConnectError("refused"),
])
async def test_absorbed_failures_give_placeholder(failure):
    start_call, _ = _start_call(failure)
    job = await PlanGenerationRequester(start_call, clock=clock).start("2024-W10")
    assert job.placeholder is True
    assert job.job_id == "temp-2024-W10"
    assert job.head_start_pct == 20
    assert job.target_week == CURRENT


@pytest.mark.asyncio
async def test_other_failures_are_fatal():
    start_call, _ = _start_call(BackendError("Backend answered 500", detail="boom"))
    with pytest.raises(GenerationStartError) as info:
        await PlanGenerationRequester(start_call, clock=clock).start(CURRENT)
    assert info.value.detail == "boom"


@pytest.mark.asyncio
async def test_gateway_timeout_through_client():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(504, text="Gateway Time-out")

    session = mock_session(handler)
    client = NutritionPlanClient(session)
    job = await PlanGenerationRequester(client.start_generation, clock=clock).start(CURRENT)
    await session.aclose()

    assert job.placeholder is True
    assert requests[0].url.path == "/plans/generate"
    assert requests[0].url.params["week"] == "2024-W10"


@pytest.mark.asyncio
async def test_server_error_through_client_is_fatal():
    session = mock_session(lambda request: httpx.Response(500, json={"message": "db down"}))
    client = NutritionPlanClient(session)
    with pytest.raises(GenerationStartError):
        await PlanGenerationRequester(client.start_generation, clock=clock).start(CURRENT)
    await session.aclose()
