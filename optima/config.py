"""
Runtime configuration for the Optima scheduling service.
Values come from the environment (or a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _sweep_minutes(value: str) -> int:
    """Beat runs the sweep with crontab(minute="*/N"), which only keeps an even period when N divides 60."""
    minutes = int(value)
    if minutes < 1 or 60 % minutes != 0:
        raise ValueError(f"EXPIRY_SWEEP_MINUTES must divide 60 (1, 2, 3, 4, 5, 6, 10, 12, 15, 20, 30 or 60), got {minutes}")
    return minutes


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./optima.db")

# Scheduling
BATCH_LIMIT = int(os.getenv("BATCH_LIMIT", "5"))
DEFAULT_STRATEGY = os.getenv("DEFAULT_STRATEGY", "greedy")
ANALYTICS_TIMEZONE = os.getenv("ANALYTICS_TIMEZONE", "UTC")

# Celery
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
EXPIRY_SWEEP_MINUTES = _sweep_minutes(os.getenv("EXPIRY_SWEEP_MINUTES", "15"))

# Startup
SEED_DEMO_DATA = _as_bool(os.getenv("SEED_DEMO_DATA", "false"))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
