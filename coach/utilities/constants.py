from typing import Final

WEEK_FORMAT: Final[str] = "{year}-W{week:02d}"
DAYS_PER_WEEK: Final[int] = 7
DAY_NAMES: Final[tuple[str, ...]] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
MEAL_SLOTS: Final[tuple[str, ...]] = ("BREAKFAST", "LUNCH", "DINNER", "SNACK")
WORKOUT_GOALS: Final[tuple[str, ...]] = ("HYPERTROPHY", "STRENGTH", "ENDURANCE", "WEIGHT_LOSS")

# Progress estimate (percent) shown while a generation job runs
PROGRESS_ACCEPTED: Final[int] = 10
PROGRESS_HEAD_START: Final[int] = 20
PROGRESS_SPAN: Final[int] = 75
PROGRESS_CAP: Final[int] = 95
PROGRESS_DONE: Final[int] = 100

# Pause between reaching 100% and handing the plan over
SETTLE_DELAY_MS: Final[int] = 1000

# Workout polling: first check of a real job waits for the typical generation time
WORKOUT_FIRST_CHECK_MS: Final[int] = 30000
WORKOUT_FOLLOWUP_MS: Final[int] = 5000
WORKOUT_PLACEHOLDER_MS: Final[int] = 10000

PLACEHOLDER_JOB_PREFIX: Final[str] = "temp-"
