"""Per-process wiring for the HTTP surface: backend clients, reconciler and session state.

Plans live only here, in memory, as the screen's session state: a fetched
or generated plan replaces the held one; a reconciled plan replaces it too.
Nothing is written to disk.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Dict, Optional

from coach.domain.Plan import Plan
from coach.domain.Workout import WorkoutPlan
from coach.infra.Plan_Client import NutritionPlanClient
from coach.infra.Workout_Client import WorkoutPlanClient
from coach.infra.transport import BackendSession
from coach.logic.generation.orchestrator import (
    GenerationHandle,
    GenerationOrchestrator,
    nutrition_orchestrator,
    workout_orchestrator,
)
from coach.logic.reconcile.mutations import PlanMutationReconciler


class SessionStore:
    def __init__(self):
        self.plans: Dict[str, Plan] = {}
        self.workouts: Dict[str, WorkoutPlan] = {}
        self.generations: Dict[str, GenerationHandle] = {}

    def keep_plan(self, plan: Optional[Plan]):
        if plan is not None:
            self.plans[str(plan.week_start)] = plan

    def keep_workout(self, plan: Optional[WorkoutPlan]):
        if plan is not None:
            self.workouts[str(plan.week_start)] = plan

    def forget_plan(self, week: str):
        self.plans.pop(week, None)


class Services:
    def __init__(self, backend: BackendSession, sleep=asyncio.sleep,
                 clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self.nutrition = NutritionPlanClient(backend)
        self.workouts = WorkoutPlanClient(backend)
        self.reconciler = PlanMutationReconciler(self.nutrition, clock=clock)
        self.store = SessionStore()
        self.sleep = sleep
        self.clock = clock

    def nutrition_generator(self) -> GenerationOrchestrator:
        return nutrition_orchestrator(self.nutrition, sleep=self.sleep, clock=self.clock)

    def workout_generator(self, days_available: int, goal: str) -> GenerationOrchestrator:
        return workout_orchestrator(self.workouts, days_available, goal, sleep=self.sleep, clock=self.clock)


_services: Optional[Services] = None


def get_services() -> Services:
    """FastAPI dependency; tests override it with a mocked backend."""
    global _services
    if _services is None:
        _services = Services(BackendSession())
    return _services


async def close_services():
    global _services
    if _services is not None:
        await _services.backend.aclose()
        _services = None
