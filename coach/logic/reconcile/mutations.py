"""Narrow plan mutations: swap one meal, regenerate one day.

Both operations check editability against the plan's own week before any
request, call the backend once (no automatic retry: every call produces a
different AI answer), then fold the partial answer into a new Plan value.
Untouched days and meals are carried over as the same objects.

Rules:
  - Past weeks are read-only: EditGuardError, and the backend is not contacted.
  - The answer must address a day (and meal slot) the plan has, and the plan
    the request was made for; otherwise ReconciliationMismatchError, so the
    caller re-fetches the full plan.
  - week_start, id, macros_target and notes never change.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from coach.domain.Plan import Meal, Plan, PlanDay
from coach.logic.guard.editability import ensure_modifiable
from coach.utilities.errors import BackendError, ReconciliationMismatchError

logger = logging.getLogger(__name__)


def _day_position(plan: Plan, day_index: int) -> int:
    for pos, day in enumerate(plan.days):
        if day.day_index == day_index:
            return pos
    raise ReconciliationMismatchError(
        detail=f"plan {plan.id} ({plan.week_start}) has no day {day_index}",
    )


def apply_swapped_meal(plan: Plan, day_index: int, meal_index: int, meal: Meal) -> Plan:
    """New plan with ``days[day_index].meals[meal_index]`` replaced by ``meal``."""
    pos = _day_position(plan, day_index)
    day = plan.days[pos]
    if not 0 <= meal_index < len(day.meals):
        raise ReconciliationMismatchError(
            detail=f"day {day_index} of plan {plan.id} has {len(day.meals)} meals, no index {meal_index}",
        )
    meals = list(day.meals)
    meals[meal_index] = meal
    days = list(plan.days)
    days[pos] = replace(day, meals=tuple(meals))
    return plan.with_days(days)


def apply_regenerated_day(plan: Plan, day_index: int, meals: Iterable[Meal]) -> Plan:
    """New plan with the meal list of ``day_index`` replaced wholesale."""
    pos = _day_position(plan, day_index)
    days = list(plan.days)
    days[pos] = PlanDay(day_index, tuple(meals))
    return plan.with_days(days)


def _parse_meals(raw: List[Dict[str, Any]]) -> List[Meal]:
    try:
        return [Meal.from_dict(m) for m in raw]
    except (TypeError, ValueError) as exc:
        raise BackendError("Malformed meal in backend response", detail=str(exc)) from exc


def _check_plan_id(plan: Plan, answered: Optional[str]):
    if answered and plan.id and answered != plan.id:
        raise ReconciliationMismatchError(detail=f"asked about plan {plan.id}, backend answered for {answered}")


class PlanMutationReconciler:
    """Runs swap / regenerate against the backend and reconciles the answer."""

    def __init__(self, client, clock: Callable[[], datetime] = datetime.now):
        self.client = client
        self.clock = clock

    async def swap_meal(self, plan: Plan, day_index: int, meal_index: int) -> Plan:
        ensure_modifiable(plan.week_start, self.clock())
        _day_position(plan, day_index)
        result = await self.client.swap_meal(plan.id, day_index, meal_index)
        _check_plan_id(plan, result.planId)
        if (result.dayIndex, result.mealIndex) != (day_index, meal_index):
            logger.warning("Swap for day %s meal %s answered for day %s meal %s",
                           day_index, meal_index, result.dayIndex, result.mealIndex)
        meal = _parse_meals([result.meal])[0]
        updated = apply_swapped_meal(plan, result.dayIndex, result.mealIndex, meal)
        logger.info("Swapped meal %s of day %s in plan %s", result.mealIndex, result.dayIndex, plan.id)
        return updated

    async def regenerate_day(self, plan: Plan, day_index: int) -> Plan:
        ensure_modifiable(plan.week_start, self.clock())
        _day_position(plan, day_index)
        result = await self.client.regenerate_day(plan.id, day_index)
        _check_plan_id(plan, result.planId)
        updated = apply_regenerated_day(plan, result.dayIndex, _parse_meals(result.meals))
        logger.info("Regenerated day %s of plan %s (%s meals)", result.dayIndex, plan.id, len(result.meals))
        return updated


__all__ = ['apply_swapped_meal', 'apply_regenerated_day', 'PlanMutationReconciler']
