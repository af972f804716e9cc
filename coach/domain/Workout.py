"""Workout plan domain values: weekly training plan (goal, available days, sessions of exercises)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from coach.domain.Plan import parse_week_start
from coach.domain.Week import WeekIdentifier
from coach.utilities.constants import WORKOUT_GOALS

GOAL_LABELS = {
    "HYPERTROPHY": "Hypertrophy",
    "STRENGTH": "Strength",
    "ENDURANCE": "Endurance",
    "WEIGHT_LOSS": "Weight loss",
}


def goal_key(goal: str) -> str:
    return (goal or '').strip().upper().replace(' ', '_')


def normalize_goal(goal: str) -> str:
    g = goal_key(goal)
    if g not in WORKOUT_GOALS:
        raise ValueError(f"unknown workout goal: {goal!r}")
    return g


@dataclass(frozen=True)
class Exercise:
    name: str
    sets: int = 0
    reps: str = ""
    rest_seconds: int = 0
    notes: str = ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Exercise:
        return Exercise(
            name=data.get('name') or '',
            sets=int(data.get('sets') or 0),
            reps=str(data.get('reps') or ''),
            rest_seconds=int(data.get('restSeconds') or data.get('rest_seconds') or 0),
            notes=data.get('notes') or '',
        )


@dataclass(frozen=True)
class WorkoutDay:
    day_index: int
    focus: str = ""
    exercises: Tuple[Exercise, ...] = ()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> WorkoutDay:
        return WorkoutDay(
            day_index=int(data.get('dayIndex')),
            focus=data.get('focus') or data.get('name') or '',
            exercises=tuple(Exercise.from_dict(e) for e in (data.get('exercises') or ()) if e),
        )


@dataclass(frozen=True)
class WorkoutPlan:
    id: str
    week_start: WeekIdentifier
    goal: Optional[str] = None
    days_available: int = 0
    days: Tuple[WorkoutDay, ...] = ()

    def is_ready(self) -> bool:
        return any(d.exercises for d in self.days)

    def day(self, day_index: int) -> Optional[WorkoutDay]:
        return next((d for d in self.days if d.day_index == day_index), None)

    @staticmethod
    def from_dict(data: Dict[str, Any], week: Optional[WeekIdentifier] = None) -> WorkoutPlan:
        goal = data.get('goal')
        return WorkoutPlan(
            id=str(data.get('id') or ''),
            week_start=parse_week_start(data.get('isoWeek') or data.get('weekStart'), fallback=week),
            goal=goal_key(goal) if goal else None,
            days_available=int(data.get('daysAvailable') or 0),
            days=tuple(WorkoutDay.from_dict(d) for d in (data.get('days') or ())),
        )


__all__ = ['Exercise', 'WorkoutDay', 'WorkoutPlan', 'GOAL_LABELS', 'goal_key', 'normalize_goal']
