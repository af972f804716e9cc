"""Configuration management for the Plan Coach client."""
import os
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Backend API
API_BASE_URL: Final[str] = os.getenv('COACH_API_BASE_URL', 'https://api-coach.recomiendameapp.cl')
API_TOKEN: Final[Optional[str]] = os.getenv('COACH_API_TOKEN') or None

# Timeouts (seconds)
DEFAULT_TIMEOUT: Final[float] = float(os.getenv('COACH_DEFAULT_TIMEOUT', '10'))
GENERATION_TIMEOUT: Final[float] = float(os.getenv('COACH_GENERATION_TIMEOUT', '120'))
REGENERATE_DAY_TIMEOUT: Final[float] = float(os.getenv('COACH_REGENERATE_DAY_TIMEOUT', '60'))
SWAP_MEAL_TIMEOUT: Final[float] = float(os.getenv('COACH_SWAP_MEAL_TIMEOUT', '30'))

# Polling budget
POLL_MAX_ATTEMPTS: Final[int] = int(os.getenv('COACH_POLL_MAX_ATTEMPTS', '30'))
POLL_INTERVAL_MS: Final[int] = int(os.getenv('COACH_POLL_INTERVAL_MS', '5000'))
WORKOUT_POLL_MAX_ATTEMPTS: Final[int] = int(os.getenv('COACH_WORKOUT_POLL_MAX_ATTEMPTS', '15'))

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
