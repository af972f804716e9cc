from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from coach.api.routes import plans, workouts
from coach.api.services import Services, close_services, get_services
from coach.domain.Week import add_weeks, current_week
from coach.events.web_observers import start as start_event_observers, get_events as get_web_events
from coach.utilities.constants import DAY_NAMES
from coach.utilities.errors import CoachError, ReconciliationMismatchError

# Logging
logger = logging.getLogger("coach_app")

# Initialize FastAPI app
app = FastAPI(title="Plan Coach API")

# Include routers
app.include_router(plans.router)
app.include_router(workouts.router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for generation progress when the app starts."""
    start_event_observers()
    logger.info("Web observers for generation events started")


@app.on_event("shutdown")
async def _shutdown_backend():
    await close_services()


@app.exception_handler(CoachError)
async def _coach_error_handler(request: Request, exc: CoachError):
    content = {"error": exc.message, "detail": exc.detail}
    if isinstance(exc, ReconciliationMismatchError):
        # the held plan was dropped; the screen must fetch it again
        content["refetch"] = True
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/api/weeks/current")
def get_current_week(offset: int = Query(default=0, ge=-520, le=520), services: Services = Depends(get_services)):
    """Current ISO week (shifted by ``offset`` weeks) with its seven dates."""
    now = services.clock()
    week = add_weeks(current_week(now), offset) if offset else current_week(now)
    return {
        "week": str(week),
        "today_index": week.today_index(now),
        "days": [
            {"dayIndex": i + 1, "dayName": DAY_NAMES[i], "date": d.isoformat()}
            for i, d in enumerate(week.days())
        ],
    }


@app.get("/api/events")
def get_events(since: Optional[int] = Query(default=None), week: Optional[str] = Query(default=None)):
    """Generation events newer than ``since``; poll again with ``next_cursor``."""
    return get_web_events(since, week)
