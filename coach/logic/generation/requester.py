"""Start of a plan generation job.

Generation is slow and usually outlives the gateway in front of the backend,
so a 504, a client-side timeout or a dropped connection at start time is
read as "the job most likely started": a placeholder job is returned and
polling proceeds with a head start. Any other failure is fatal.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

import httpx

from coach.domain.Week import WeekIdentifier, coerce_week
from coach.utilities.constants import PLACEHOLDER_JOB_PREFIX, PROGRESS_ACCEPTED, PROGRESS_HEAD_START
from coach.utilities.errors import CoachError, GenerationStartError
from coach.utilities.network import classify_failure, is_absorbable_start_failure
from coach.utilities.validators import GenerationAccepted

logger = logging.getLogger(__name__)

StartCall = Callable[[WeekIdentifier], Awaitable[GenerationAccepted]]


@dataclass(frozen=True)
class GenerationJob:
    job_id: str
    target_week: WeekIdentifier
    created_at: datetime
    placeholder: bool = False
    head_start_pct: int = PROGRESS_ACCEPTED
    already_existed: bool = False


def placeholder_job(week: WeekIdentifier, now: datetime) -> GenerationJob:
    return GenerationJob(
        job_id=f"{PLACEHOLDER_JOB_PREFIX}{week}",
        target_week=week,
        created_at=now,
        placeholder=True,
        head_start_pct=PROGRESS_HEAD_START,
    )


class PlanGenerationRequester:
    """Issues the "begin generation" call and classifies its outcome."""

    def __init__(self, start_call: StartCall, clock: Callable[[], datetime] = datetime.now):
        self.start_call = start_call
        self.clock = clock

    async def start(self, week: Union[WeekIdentifier, str, None] = None) -> GenerationJob:
        now = self.clock()
        target = coerce_week(week, now)
        try:
            accepted = await self.start_call(target)
        except (CoachError, httpx.HTTPError) as exc:
            error = classify_failure(exc)
            if is_absorbable_start_failure(error):
                logger.warning("Generation start for %s ended with %s; polling anyway", target, error.message)
                return placeholder_job(target, now)
            logger.error("Generation start for %s failed: %s", target, error.message)
            raise GenerationStartError(detail=error.detail) from exc

        if not accepted.created:
            logger.info("Backend reports an existing plan for %s", target)
        return GenerationJob(
            job_id=accepted.planId or f"{PLACEHOLDER_JOB_PREFIX}{target}",
            target_week=target,
            created_at=now,
            placeholder=False,
            head_start_pct=PROGRESS_ACCEPTED,
            already_existed=not accepted.created,
        )


__all__ = ['GenerationJob', 'PlanGenerationRequester', 'placeholder_job']
