import logging
from typing import Optional

from coach.domain.Plan import Plan
from coach.domain.ShoppingList import ShoppingList
from coach.domain.Week import WeekIdentifier
from coach.infra.transport import BackendSession
from coach.utilities.config import GENERATION_TIMEOUT, REGENERATE_DAY_TIMEOUT, SWAP_MEAL_TIMEOUT
from coach.utilities.errors import BackendError, NotFoundError
from coach.utilities.validators import (
    GenerationAccepted,
    RegenerateDayResult,
    SwapMealResult,
    parse_envelope,
)

logger = logging.getLogger(__name__)


class NutritionPlanClient:
    """Weekly nutrition plan endpoints of the coaching backend."""

    def __init__(self, session: BackendSession):
        self.session = session

    async def fetch_plan(self, week: WeekIdentifier) -> Optional[Plan]:
        """Plan for ``week``, or None when the backend has none (404)."""
        try:
            response = await self.session.request("GET", "/plans", params={"week": str(week)})
        except NotFoundError:
            return None
        try:
            data = response.json()
            return Plan.from_dict(data, week=week) if data else None
        except (ValueError, TypeError, KeyError) as exc:
            raise BackendError("Malformed plan response", detail=str(exc)) from exc

    async def start_generation(self, week: WeekIdentifier) -> GenerationAccepted:
        response = await self.session.request(
            "POST", "/plans/generate", params={"week": str(week)}, json={}, timeout=GENERATION_TIMEOUT,
        )
        return parse_envelope(GenerationAccepted, response.json(), "generation")

    async def swap_meal(self, plan_id: str, day_index: int, meal_index: int) -> SwapMealResult:
        response = await self.session.request(
            "POST", f"/plans/{plan_id}/days/{day_index}/meals/{meal_index}/swap", timeout=SWAP_MEAL_TIMEOUT,
        )
        return parse_envelope(SwapMealResult, response.json(), "swap meal")

    async def regenerate_day(self, plan_id: str, day_index: int) -> RegenerateDayResult:
        response = await self.session.request(
            "POST", f"/plans/{plan_id}/days/{day_index}/regenerate", json={}, timeout=REGENERATE_DAY_TIMEOUT,
        )
        return parse_envelope(RegenerateDayResult, response.json(), "regenerate day")

    async def get_shopping_list(self, plan_id: str, take: int = 500) -> ShoppingList:
        response = await self.session.request("GET", f"/plans/{plan_id}/shopping-list", params={"take": take})
        return ShoppingList.from_dict(response.json() or {})

    async def export_shopping_list_csv(self, plan_id: str) -> str:
        response = await self.session.request("GET", f"/plans/{plan_id}/shopping-list.csv")
        return response.text
