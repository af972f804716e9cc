from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from typing import List, Optional
import logging

from coach.api.services import Services, get_services
from coach.domain.Week import WeekIdentifier
from coach.logic.guard.editability import can_modify, can_navigate_next, ensure_modifiable
from coach.logic.reporting.nutrition import compute_week_nutrition
from coach.utilities.errors import ReconciliationMismatchError
from coach.utilities.validators import DayRegenerateInput, MealSwapInput

router = APIRouter(prefix="/api/plans", tags=["Plans"])
logger = logging.getLogger(__name__)


def parse_week(week: str) -> WeekIdentifier:
    try:
        return WeekIdentifier.parse(week)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _plan_view(plan, services: Services) -> dict:
    now = services.clock()
    data = plan.to_dict()
    data["editable"] = can_modify(plan.week_start, now)
    data["can_navigate_next"] = can_navigate_next(plan.week_start, now)
    return data


async def _session_plan(week: WeekIdentifier, services: Services, refresh: bool = False):
    key = str(week)
    if refresh or key not in services.store.plans:
        services.store.keep_plan(await services.nutrition.fetch_plan(week))
    plan = services.store.plans.get(key)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"No plan for {key}")
    return plan


@router.get("/{week}")
async def get_plan(week: str, refresh: bool = Query(default=False), services: Services = Depends(get_services)):
    plan = await _session_plan(parse_week(week), services, refresh=refresh)
    return _plan_view(plan, services)


@router.post("/{week}/generate", status_code=202)
async def generate_plan(week: str, services: Services = Depends(get_services)):
    target = parse_week(week)
    ensure_modifiable(target, services.clock())
    handle = await services.nutrition_generator().request_generation(
        target, on_ready=services.store.keep_plan,
    )
    services.store.generations[f"nutrition:{target}"] = handle
    return {
        "week": str(target),
        "job_id": handle.job.job_id,
        "placeholder": handle.job.placeholder,
        "progress": handle.state.progress_pct,
    }


@router.get("/{week}/generation")
async def generation_status(week: str, services: Services = Depends(get_services)):
    target = parse_week(week)
    handle = services.store.generations.get(f"nutrition:{target}")
    if handle is None:
        raise HTTPException(status_code=404, detail=f"No generation started for {target}")
    state = handle.state
    return {
        "week": str(target),
        "job_id": handle.job.job_id,
        "attempt": state.attempt,
        "max_attempts": state.max_attempts,
        "progress": state.progress_pct,
        "status": state.status.value,
    }


@router.post("/{week}/swap")
async def swap_meal(week: str, body: MealSwapInput, services: Services = Depends(get_services)):
    target = parse_week(week)
    ensure_modifiable(target, services.clock())
    plan = await _session_plan(target, services)
    try:
        updated = await services.reconciler.swap_meal(plan, body.dayIndex, body.mealIndex)
    except ReconciliationMismatchError:
        services.store.forget_plan(str(target))
        raise
    services.store.keep_plan(updated)
    return _plan_view(updated, services)


@router.post("/{week}/regenerate-day")
async def regenerate_day(week: str, body: DayRegenerateInput, services: Services = Depends(get_services)):
    target = parse_week(week)
    ensure_modifiable(target, services.clock())
    plan = await _session_plan(target, services)
    try:
        updated = await services.reconciler.regenerate_day(plan, body.dayIndex)
    except ReconciliationMismatchError:
        services.store.forget_plan(str(target))
        raise
    services.store.keep_plan(updated)
    return _plan_view(updated, services)


@router.get("/{week}/nutrition")
async def week_nutrition(week: str, consumed: Optional[List[str]] = Query(default=None),
                         services: Services = Depends(get_services)):
    plan = await _session_plan(parse_week(week), services)
    return compute_week_nutrition(plan, consumed)


@router.get("/{week}/shopping-list")
async def shopping_list(week: str, take: int = Query(default=500, ge=1, le=1000),
                        services: Services = Depends(get_services)):
    plan = await _session_plan(parse_week(week), services)
    result = await services.nutrition.get_shopping_list(plan.id, take)
    return {
        "planId": result.plan_id,
        "total": result.total,
        "nextCursor": result.next_cursor,
        "sections": [
            {"category": category, "items": [{"name": i.name, "unit": i.unit, "qty": i.qty} for i in items]}
            for category, items in result.by_category().items()
        ],
    }


@router.get("/{week}/shopping-list.csv", response_class=PlainTextResponse)
async def shopping_list_csv(week: str, services: Services = Depends(get_services)):
    plan = await _session_plan(parse_week(week), services)
    csv_text = await services.nutrition.export_shopping_list_csv(plan.id)
    return PlainTextResponse(csv_text, media_type="text/csv")
