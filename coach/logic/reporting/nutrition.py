"""Nutrition aggregation for a weekly plan.

Planned totals per day and per week, plus consumed totals for the meals the
user marked as eaten (markers "<dayIndex>-<mealIndex>") against the plan's
daily macro target.
"""
from collections import defaultdict
from typing import Dict, Any, Iterable, Optional

from coach.domain.Plan import Plan
from coach.utilities.constants import DAY_NAMES

_MACROS = ('kcal', 'protein_g', 'carbs_g', 'fat_g')


def meal_marker(day_index: int, meal_index: int) -> str:
    return f"{day_index}-{meal_index}"


def _pct(value, target) -> float:
    if not target:
        return 0.0
    return min(100.0, value / target * 100)


def compute_week_nutrition(plan: Optional[Plan], consumed: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Aggregate nutrition stats for the given week plan.

    Returns structure:
    {
      'days': {
         1: {'day_name': 'Monday', 'date': 'YYYY-MM-DD',
             'planned': {kcal, protein_g, carbs_g, fat_g},
             'consumed': {kcal, protein_g, carbs_g, fat_g},
             'consumed_pct': {kcal, protein_g, carbs_g, fat_g}},
         ...
      },
      'week_totals': {kcal, protein_g, carbs_g, fat_g}
    }
    """
    empty = {m: 0 for m in _MACROS}
    if not plan or not plan.days:
        return {'days': {}, 'week_totals': dict(empty)}

    eaten = set(consumed or ())
    target = plan.macros_target
    target_by_macro = {'kcal': target.kcal, 'protein_g': target.protein_g,
                       'carbs_g': target.carbs_g, 'fat_g': target.fat_g}
    dates = plan.week_start.days()
    days_result = {}
    totals = defaultdict(int)

    for day in sorted(plan.days, key=lambda d: d.day_index):
        planned = defaultdict(int)
        done = defaultdict(int)
        for i, meal in enumerate(day.meals):
            for m in _MACROS:
                planned[m] += getattr(meal, m)
                if meal_marker(day.day_index, i) in eaten:
                    done[m] += getattr(meal, m)
        days_result[day.day_index] = {
            'day_name': DAY_NAMES[day.day_index - 1],
            'date': dates[day.day_index - 1].isoformat(),
            'planned': {m: planned[m] for m in _MACROS},
            'consumed': {m: done[m] for m in _MACROS},
            'consumed_pct': {m: _pct(done[m], target_by_macro[m]) for m in _MACROS},
        }
        for m in _MACROS:
            totals[m] += planned[m]

    return {
        'days': days_result,
        'week_totals': {m: totals[m] for m in _MACROS},
    }


__all__ = ["compute_week_nutrition", "meal_marker"]
