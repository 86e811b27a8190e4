"""
Deadline checks shared by the expiry sweep and any other caller.
"""

from datetime import date, datetime, timedelta

from optima.models import ProjectStatus


def due_date(project) -> date:
    """Last calendar day the project can still be worked; slot 1 is the creation day."""
    return project.created_at.date() + timedelta(days=project.deadline - 1)


def is_past_deadline(project, now: datetime) -> bool:
    """
    True when a PENDING project has run out of day-slots:
    `deadline` whole calendar days have passed since it was created.
    """
    if project.status != ProjectStatus.PENDING or project.created_at is None:
        return False
    return now.date() > due_date(project)
