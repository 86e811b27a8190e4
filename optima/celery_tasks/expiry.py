"""
Periodic deadline-expiry sweep.
"""

import logging

from optima.celery_app import celery_app
from optima.exceptions import SchedulingError
from optima.services.scheduling_service import get_scheduling_service

logger = logging.getLogger(__name__)


@celery_app.task(name="optima.celery_tasks.expiry.sweep_expired_projects")
def sweep_expired_projects():
    """Mark PENDING projects whose deadline has passed as NOT_COMPLETED."""
    service = get_scheduling_service()
    try:
        expired = service.sweep_expired()
    except SchedulingError as e:
        logger.error(f"❌ Expiry sweep failed: {e}")
        return {"status": "error", "message": str(e)}

    if expired:
        logger.info(f"✅ Expiry sweep marked {len(expired)} projects NOT_COMPLETED")
    else:
        logger.info("Expiry sweep found no overdue projects")
    return {"status": "success", "expired": expired}
