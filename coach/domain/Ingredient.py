"""Ingredient references inside a planned meal.

The backend sends either a plain string or an object ``{name, qty|quantity, unit}``
for any ingredient. Both are normalized here into a tagged variant and rendered
through ``render_ingredient``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class NamedIngredient:
    text: str
    kind: str = "named"


@dataclass(frozen=True)
class DetailedIngredient:
    name: str
    qty: Optional[Union[int, float, str]] = None
    unit: Optional[str] = None
    kind: str = "detailed"


IngredientRef = Union[NamedIngredient, DetailedIngredient]


def _format_qty(qty) -> str:
    if isinstance(qty, float) and qty.is_integer():
        return str(int(qty))
    return str(qty).strip()


def parse_ingredient(raw: Any) -> IngredientRef:
    '''Build an IngredientRef from either wire shape. Unknown keys are ignored.'''
    if isinstance(raw, (NamedIngredient, DetailedIngredient)):
        return raw
    if isinstance(raw, str):
        return NamedIngredient(raw.strip())
    if isinstance(raw, dict):
        qty = raw.get('qty')
        if qty in (None, ''):
            qty = raw.get('quantity')
        unit = raw.get('unit') or None
        return DetailedIngredient(
            name=str(raw.get('name') or '').strip(),
            qty=None if qty in (None, '') else qty,
            unit=unit.strip() if isinstance(unit, str) else unit,
        )
    raise ValueError(f"unsupported ingredient shape: {type(raw).__name__}")


def render_ingredient(ref: IngredientRef) -> str:
    '''Display text: "name" or "name (qty unit)" when both qty and unit are known.'''
    if isinstance(ref, NamedIngredient):
        return ref.text
    display = ref.name
    if ref.qty not in (None, '', 0) and ref.unit:
        display += f" ({_format_qty(ref.qty)} {ref.unit})"
    return display


def ingredient_to_dict(ref: IngredientRef) -> Union[str, dict]:
    '''Wire form, mirroring the shape the backend sent.'''
    if isinstance(ref, NamedIngredient):
        return ref.text
    d: dict = {"name": ref.name}
    if ref.qty is not None:
        d["qty"] = ref.qty
    if ref.unit is not None:
        d["unit"] = ref.unit
    return d


__all__ = [
    'NamedIngredient', 'DetailedIngredient', 'IngredientRef',
    'parse_ingredient', 'render_ingredient', 'ingredient_to_dict',
]
