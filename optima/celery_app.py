"""
Celery Configuration for Optima with Beat Scheduling
"""

from celery import Celery
from celery.schedules import crontab

from .config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, EXPIRY_SWEEP_MINUTES

# Create Celery app
celery_app = Celery(
    "optima",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["optima.celery_tasks.expiry"]
)

# Basic configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)

# Beat schedule configuration
celery_app.conf.beat_schedule = {
    'sweep-expired-projects': {
        'task': 'optima.celery_tasks.expiry.sweep_expired_projects',
        'schedule': crontab(minute=f'*/{EXPIRY_SWEEP_MINUTES}'),
    },
}

if __name__ == "__main__":
    celery_app.start()
