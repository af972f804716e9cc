"""
Pydantic schemas for backend envelopes and local API inputs.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Any, Dict, List, Optional

from coach.utilities.constants import WORKOUT_GOALS
from coach.utilities.errors import BackendError

WEEK_PATTERN = r'^\d{4}-W\d{2}$'


class GenerationAccepted(BaseModel):
    """Answer of a "begin generation" call."""
    model_config = ConfigDict(extra='ignore')

    planId: Optional[str] = None
    created: bool = False


class SwapMealResult(BaseModel):
    """Answer of a meal swap: the replacement meal and where it goes."""
    model_config = ConfigDict(extra='ignore')

    planId: Optional[str] = None
    dayIndex: int = Field(..., ge=1, le=7)
    mealIndex: int = Field(..., ge=0)
    meal: Dict[str, Any]


class RegenerateDayResult(BaseModel):
    """Answer of a day regeneration: the full new meal list for one day."""
    model_config = ConfigDict(extra='ignore')

    planId: Optional[str] = None
    dayIndex: int = Field(..., ge=1, le=7)
    meals: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator('meals')
    @classmethod
    def drop_null_meals(cls, v):
        """The backend occasionally pads meal lists with nulls."""
        return [m for m in v if m is not None]


class WorkoutGenerateInput(BaseModel):
    """Schema for workout generation requests."""
    isoWeek: Optional[str] = Field(None, pattern=WEEK_PATTERN)
    daysAvailable: int = Field(..., ge=1, le=7)
    goal: str

    @field_validator('goal')
    @classmethod
    def validate_goal(cls, v):
        """Accept goals case-insensitively, store them upper-case."""
        g = v.strip().upper().replace(' ', '_')
        if g not in WORKOUT_GOALS:
            raise ValueError(f"goal must be one of {', '.join(WORKOUT_GOALS)}")
        return g


class MealSwapInput(BaseModel):
    """Schema for a swap request against the session plan."""
    dayIndex: int = Field(..., ge=1, le=7)
    mealIndex: int = Field(..., ge=0)


class DayRegenerateInput(BaseModel):
    """Schema for a day regeneration request against the session plan."""
    dayIndex: int = Field(..., ge=1, le=7)


def parse_envelope(schema, payload, what: str):
    """Validate a backend answer; malformed answers become BackendError."""
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise BackendError(f"Malformed {what} response", detail=str(exc)) from exc
