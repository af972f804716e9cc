from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from coach.api.routes.plans import parse_week
from coach.api.services import Services, get_services
from coach.domain.Week import coerce_week
from coach.domain.Workout import GOAL_LABELS
from coach.logic.guard.editability import can_modify, ensure_modifiable
from coach.utilities.validators import WorkoutGenerateInput

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])
logger = logging.getLogger(__name__)


def _workout_view(plan, services: Services) -> dict:
    return {
        "id": plan.id,
        "isoWeek": str(plan.week_start),
        "goal": plan.goal,
        "goalLabel": GOAL_LABELS.get(plan.goal or "", plan.goal),
        "daysAvailable": plan.days_available,
        "editable": can_modify(plan.week_start, services.clock()),
        "days": [
            {
                "dayIndex": d.day_index,
                "focus": d.focus,
                "exercises": [
                    {"name": e.name, "sets": e.sets, "reps": e.reps, "restSeconds": e.rest_seconds, "notes": e.notes}
                    for e in d.exercises
                ],
            }
            for d in plan.days
        ],
    }


@router.get("/{week}")
async def get_workout_plan(week: str, refresh: bool = Query(default=False),
                           services: Services = Depends(get_services)):
    target = parse_week(week)
    key = str(target)
    if refresh or key not in services.store.workouts:
        services.store.keep_workout(await services.workouts.fetch_plan(target))
    plan = services.store.workouts.get(key)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"No workout plan for {key}")
    return _workout_view(plan, services)


@router.post("/generate", status_code=202)
async def generate_workout_plan(body: WorkoutGenerateInput, services: Services = Depends(get_services)):
    target = coerce_week(body.isoWeek, services.clock())
    ensure_modifiable(target, services.clock())
    handle = await services.workout_generator(body.daysAvailable, body.goal).request_generation(
        target, on_ready=services.store.keep_workout,
    )
    services.store.generations[f"workout:{target}"] = handle
    return {
        "week": str(target),
        "job_id": handle.job.job_id,
        "placeholder": handle.job.placeholder,
        "progress": handle.state.progress_pct,
    }
