"""
Immutable views of projects and schedules used as algorithm input and output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from optima.models import ProjectStatus


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    A point-in-time copy of one project row, detached from any session,
    so algorithms can read it freely without touching the store.
    """
    id: int
    title: str
    deadline: int
    expected_revenue: Decimal
    status: ProjectStatus = ProjectStatus.PENDING
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, project) -> "ProjectSnapshot":
        return cls(
            id=project.id,
            title=project.title,
            deadline=project.deadline,
            expected_revenue=Decimal(project.expected_revenue),
            status=project.status,
            created_at=project.created_at,
            completed_at=project.completed_at,
        )


@dataclass(frozen=True)
class ScheduleResult:
    """
    Slot assignment produced by a strategy.
    `slots` maps day-slot (1-based) to the project occupying it, ordered by slot.
    """
    slots: Dict[int, ProjectSnapshot] = field(default_factory=dict)
    total_revenue: Decimal = Decimal("0")
    unscheduled: Tuple[int, ...] = ()

    @property
    def projects_scheduled(self) -> int:
        return len(self.slots)

    @property
    def project_ids(self) -> Tuple[int, ...]:
        return tuple(project.id for project in self.slots.values())
