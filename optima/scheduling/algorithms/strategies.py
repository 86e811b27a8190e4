"""
The four allocation strategies.

Each strategy is a plain function `compute(projects, batch_limit) -> ScheduleResult`
wrapped in a `Strategy` record with its display metadata. They are pure: the
input sequence is never mutated and equal input gives equal output.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Sequence

from ..core.constants import GREEDY, PRIORITY, EDF, FCFS
from ..core.snapshot import ProjectSnapshot, ScheduleResult
from .packing import pack, latest_free_slot, earliest_free_slot

ComputeFunc = Callable[[Sequence[ProjectSnapshot], int], ScheduleResult]


@dataclass(frozen=True)
class Strategy:
    key: str
    name: str
    description: str
    complexity: str
    compute: ComputeFunc


def greedy_schedule(projects: Sequence[ProjectSnapshot], batch_limit: int) -> ScheduleResult:
    """
    Deadline-constrained profit maximization.
    Highest revenue first (ties by id), each placed in the latest free slot
    not after its deadline. Optimal for one unit-length project per slot.
    """
    ordered = sorted(projects, key=lambda p: (-p.expected_revenue, p.id))
    return pack(ordered, batch_limit, latest_free_slot)


def priority_schedule(projects: Sequence[ProjectSnapshot], batch_limit: int) -> ScheduleResult:
    """Highest revenue first (ties by id), each in the earliest free slot."""
    ordered = sorted(projects, key=lambda p: (-p.expected_revenue, p.id))
    return pack(ordered, batch_limit, earliest_free_slot)


def edf_schedule(projects: Sequence[ProjectSnapshot], batch_limit: int) -> ScheduleResult:
    """Earliest deadline first (ties by id), each in the earliest free slot."""
    ordered = sorted(projects, key=lambda p: (p.deadline, p.id))
    return pack(ordered, batch_limit, earliest_free_slot)


def fcfs_schedule(projects: Sequence[ProjectSnapshot], batch_limit: int) -> ScheduleResult:
    """Submission order (ascending id), each in the earliest free slot."""
    ordered = sorted(projects, key=lambda p: p.id)
    return pack(ordered, batch_limit, earliest_free_slot)


STRATEGIES: Dict[str, Strategy] = {
    GREEDY: Strategy(
        key=GREEDY,
        name="Greedy (Revenue-Deadline)",
        description=(
            "Sorts projects by highest revenue and slots each one as late as possible before "
            "its deadline, reserving earlier slots for tighter deadlines."
        ),
        complexity="O(n log n)",
        compute=greedy_schedule,
    ),
    EDF: Strategy(
        key=EDF,
        name="EDF (Earliest Deadline First)",
        description="Schedules the most time-critical projects first, at the earliest available day.",
        complexity="O(n log n)",
        compute=edf_schedule,
    ),
    PRIORITY: Strategy(
        key=PRIORITY,
        name="Priority (Highest Revenue)",
        description="Schedules the highest-revenue projects first, at the earliest available day.",
        complexity="O(n log n)",
        compute=priority_schedule,
    ),
    FCFS: Strategy(
        key=FCFS,
        name="FCFS (First Come First Served)",
        description="Schedules projects in the order they were submitted.",
        complexity="O(n log n)",
        compute=fcfs_schedule,
    ),
}
