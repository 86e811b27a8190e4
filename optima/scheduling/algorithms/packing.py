"""
Day-slot packing shared by every strategy.

A strategy decides the order in which projects are considered and which free
slot a project takes; packing walks that order and fills at most
`batch_limit` slots numbered 1..batch_limit. A project may only occupy a slot
s with s <= min(deadline, batch_limit).
"""

from decimal import Decimal
from typing import Callable, Iterable, Mapping, Optional

from ..core.snapshot import ProjectSnapshot, ScheduleResult

SlotFinder = Callable[[Mapping[int, ProjectSnapshot], int], Optional[int]]


def latest_free_slot(occupied: Mapping[int, ProjectSnapshot], bound: int) -> Optional[int]:
    """Scan downward from `bound`; reserves early slots for tighter deadlines."""
    for slot in range(bound, 0, -1):
        if slot not in occupied:
            return slot
    return None


def earliest_free_slot(occupied: Mapping[int, ProjectSnapshot], bound: int) -> Optional[int]:
    for slot in range(1, bound + 1):
        if slot not in occupied:
            return slot
    return None


def pack(ordered_projects: Iterable[ProjectSnapshot], batch_limit: int, find_slot: SlotFinder) -> ScheduleResult:
    """Place projects in the given order; projects with no feasible free slot are skipped."""
    if batch_limit < 1:
        raise ValueError(f"batch_limit must be at least 1, got {batch_limit}")

    slots = {}
    unscheduled = []
    for project in ordered_projects:
        if len(slots) >= batch_limit:
            unscheduled.append(project.id)
            continue

        bound = min(project.deadline, batch_limit)
        slot = find_slot(slots, bound)
        if slot is None:
            unscheduled.append(project.id)
            continue
        slots[slot] = project

    total_revenue = sum((project.expected_revenue for project in slots.values()), Decimal("0"))
    return ScheduleResult(
        slots=dict(sorted(slots.items())),
        total_revenue=total_revenue,
        unscheduled=tuple(sorted(unscheduled)),
    )
