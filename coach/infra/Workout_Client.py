import logging
from typing import Optional

from coach.domain.Week import WeekIdentifier
from coach.domain.Workout import WorkoutPlan, normalize_goal
from coach.infra.transport import BackendSession
from coach.utilities.config import GENERATION_TIMEOUT
from coach.utilities.errors import BackendError, NotFoundError
from coach.utilities.validators import GenerationAccepted, parse_envelope

logger = logging.getLogger(__name__)


class WorkoutPlanClient:
    """Weekly workout plan endpoints of the coaching backend."""

    def __init__(self, session: BackendSession):
        self.session = session

    async def fetch_plan(self, week: WeekIdentifier) -> Optional[WorkoutPlan]:
        try:
            response = await self.session.request("GET", "/workouts/plan", params={"isoWeek": str(week)})
        except NotFoundError:
            logger.info("No workout plan for %s", week)
            return None
        try:
            data = response.json()
            return WorkoutPlan.from_dict(data, week=week) if data else None
        except (ValueError, TypeError, KeyError) as exc:
            raise BackendError("Malformed workout plan response", detail=str(exc)) from exc

    async def start_generation(self, week: WeekIdentifier, days_available: int, goal: str) -> GenerationAccepted:
        payload = {"isoWeek": str(week), "daysAvailable": days_available, "goal": normalize_goal(goal)}
        logger.info("Requesting workout plan: %s", payload)
        response = await self.session.request("POST", "/workouts/generate", json=payload, timeout=GENERATION_TIMEOUT)
        return parse_envelope(GenerationAccepted, response.json(), "workout generation")
