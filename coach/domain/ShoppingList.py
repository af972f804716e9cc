"""ShoppingList: items the backend aggregated from a plan's ingredients."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ShoppingListItem:
    name: str
    unit: str = ""
    qty: float = 0
    category: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ShoppingListItem:
        return ShoppingListItem(
            name=data.get('name') or '',
            unit=data.get('unit') or '',
            qty=data.get('qty') or 0,
            category=data.get('category'),
        )


@dataclass(frozen=True)
class ShoppingList:
    plan_id: str
    items: Tuple[ShoppingListItem, ...] = ()
    next_cursor: Optional[str] = None
    total: int = 0

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ShoppingList:
        items = tuple(ShoppingListItem.from_dict(i) for i in (data.get('items') or ()))
        return ShoppingList(
            plan_id=str(data.get('planId') or ''),
            items=items,
            next_cursor=data.get('nextCursor'),
            total=int(data.get('total') or len(items)),
        )

    def by_category(self) -> Dict[str, list]:
        '''Group items by category ("Other" when missing), categories sorted.'''
        groups: Dict[str, list] = {}
        for item in self.items:
            groups.setdefault(item.category or 'Other', []).append(item)
        return {k: groups[k] for k in sorted(groups)}
