"""Plan domain values: weekly nutrition plan (week, macro targets, notes, days of meals).

Values are immutable. Mutations produce new Plan values (see
coach.logic.reconcile.mutations); a freshly fetched Plan replaces the old one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

from coach.domain.Ingredient import IngredientRef, ingredient_to_dict, parse_ingredient
from coach.domain.Week import WeekIdentifier

_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}')


def _num(value, default=0):
    if value in (None, ''):
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value) if '.' in str(value) else int(value)
    except (TypeError, ValueError):
        return default


def parse_week_start(raw: Any, fallback: Optional[WeekIdentifier] = None) -> WeekIdentifier:
    '''weekStart may come as "YYYY-Wnn" or as the Monday's ISO date.'''
    if isinstance(raw, WeekIdentifier):
        return raw
    if isinstance(raw, str) and raw:
        if _ISO_DATE.match(raw):
            return WeekIdentifier.from_date(date.fromisoformat(raw[:10]))
        return WeekIdentifier.parse(raw)
    if fallback is not None:
        return fallback
    raise ValueError(f"plan has no usable weekStart: {raw!r}")


@dataclass(frozen=True)
class MacrosTarget:
    kcal: int = 0
    protein_g: int = 0
    carbs_g: int = 0
    fat_g: int = 0

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> MacrosTarget:
        d = data or {}
        return MacrosTarget(
            kcal=_num(d.get('kcalTarget', d.get('kcal'))),
            protein_g=_num(d.get('protein_g')),
            carbs_g=_num(d.get('carbs_g')),
            fat_g=_num(d.get('fat_g')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kcalTarget": self.kcal,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
        }


@dataclass(frozen=True)
class Meal:
    slot: str
    title: str
    kcal: int = 0
    protein_g: int = 0
    carbs_g: int = 0
    fat_g: int = 0
    tags: Tuple[str, ...] = ()
    ingredients: Tuple[IngredientRef, ...] = ()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Meal:
        if not isinstance(data, dict):
            raise ValueError(f"meal must be an object, got {type(data).__name__}")
        return Meal(
            slot=str(data.get('slot') or '').upper(),
            title=data.get('title') or '',
            kcal=_num(data.get('kcal')),
            protein_g=_num(data.get('protein_g')),
            carbs_g=_num(data.get('carbs_g')),
            fat_g=_num(data.get('fat_g')),
            tags=tuple(data.get('tags') or ()),
            ingredients=tuple(parse_ingredient(i) for i in (data.get('ingredients') or ())),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": self.slot,
            "title": self.title,
            "kcal": self.kcal,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
            "tags": list(self.tags),
            "ingredients": [ingredient_to_dict(i) for i in self.ingredients],
        }


@dataclass(frozen=True)
class PlanDay:
    day_index: int
    meals: Tuple[Meal, ...] = ()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> PlanDay:
        day_index = int(data.get('dayIndex'))
        if not 1 <= day_index <= 7:
            raise ValueError(f"dayIndex must be in 1..7, got {day_index}")
        return PlanDay(day_index, tuple(Meal.from_dict(m) for m in (data.get('meals') or ()) if m is not None))

    def to_dict(self) -> Dict[str, Any]:
        return {"dayIndex": self.day_index, "meals": [m.to_dict() for m in self.meals]}


@dataclass(frozen=True)
class Plan:
    id: str
    week_start: WeekIdentifier
    macros_target: MacrosTarget = field(default_factory=MacrosTarget)
    notes: str = ""
    days: Tuple[PlanDay, ...] = ()

    def __post_init__(self):
        seen = set()
        for d in self.days:
            if d.day_index in seen:
                raise ValueError(f"duplicate dayIndex {d.day_index} in plan {self.id}")
            seen.add(d.day_index)

    def is_ready(self) -> bool:
        '''An empty shell (no days, or only empty days) is not a finished plan.'''
        return any(d.meals for d in self.days)

    def day(self, day_index: int) -> Optional[PlanDay]:
        return next((d for d in self.days if d.day_index == day_index), None)

    def with_days(self, days: Iterable[PlanDay]) -> Plan:
        return replace(self, days=tuple(days))

    @staticmethod
    def from_dict(data: Dict[str, Any], week: Optional[WeekIdentifier] = None) -> Plan:
        return Plan(
            id=str(data.get('id') or ''),
            week_start=parse_week_start(data.get('weekStart'), fallback=week),
            macros_target=MacrosTarget.from_dict(data.get('macros')),
            notes=data.get('notes') or '',
            days=tuple(PlanDay.from_dict(d) for d in (data.get('days') or ())),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "weekStart": str(self.week_start),
            "macros": self.macros_target.to_dict(),
            "notes": self.notes,
            "days": [d.to_dict() for d in self.days],
        }


def is_plan_ready(plan: Optional[Plan]) -> bool:
    return plan is not None and plan.is_ready()


__all__ = ['MacrosTarget', 'Meal', 'PlanDay', 'Plan', 'is_plan_ready', 'parse_week_start']
