"""
Scheduling service: the engine's request surface.

One instance owns a project store, a strategy registry (the current strategy
selection lives here, not in a module global) and the write lock that
serializes every mutation of the store.
"""

import logging
import math
import threading
from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta, date
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

import pytz

from ..config import BATCH_LIMIT, DEFAULT_STRATEGY, ANALYTICS_TIMEZONE
from ..database import SessionLocal
from ..exceptions import ValidationError, NotFound, ConcurrencyConflict, SchedulingError
from ..models import ProjectStatus, utcnow
from ..scheduling import (
    MAX_DEADLINE,
    Prediction,
    ProjectSnapshot,
    ScheduleResult,
    Strategy,
    StrategyRegistry,
    is_past_deadline,
    predict,
)
from .project_store import ProjectStore

logger = logging.getLogger(__name__)

MAX_REVENUE = Decimal("9999999999.99")  # Numeric(12, 2)
WEEK_DAYS = 7
MONTH_DAYS = 30
ANALYTICS_DAYS = 30


@dataclass(frozen=True)
class ComputedSchedule:
    strategy: Strategy
    batch_limit: int
    result: ScheduleResult


@dataclass(frozen=True)
class ExecutionResult:
    strategy: Strategy
    batch_limit: int
    result: ScheduleResult
    completed_at: datetime


@dataclass(frozen=True)
class RevenueStats:
    weekly_revenue: Decimal
    monthly_revenue: Decimal
    projects_completed_this_week: int
    projects_completed_this_month: int


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    revenue: Decimal


def validate_project_fields(title, deadline, expected_revenue) -> Tuple[str, int, Decimal]:
    """Check and normalize user-supplied project fields. Raises ValidationError."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    title = title.strip()

    if isinstance(deadline, bool) or not isinstance(deadline, int):
        raise ValidationError("Deadline must be a whole number of days")
    if deadline < 1 or deadline > MAX_DEADLINE:
        raise ValidationError(f"Deadline must be between 1 and {MAX_DEADLINE} days")

    if isinstance(expected_revenue, bool) or expected_revenue is None:
        raise ValidationError("Expected revenue is required")
    if isinstance(expected_revenue, float) and not math.isfinite(expected_revenue):
        raise ValidationError("Expected revenue must be a finite amount")
    try:
        revenue = Decimal(str(expected_revenue))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Expected revenue is not a number: {expected_revenue!r}")
    if not revenue.is_finite():
        raise ValidationError("Expected revenue must be a finite amount")
    if revenue < 0:
        raise ValidationError("Expected revenue cannot be negative")
    if revenue > MAX_REVENUE:
        raise ValidationError(f"Expected revenue cannot exceed {MAX_REVENUE}")

    return title, deadline, revenue.quantize(Decimal("0.01"))


class SchedulingService:
    def __init__(
        self,
        session_factory,
        batch_limit: int = BATCH_LIMIT,
        default_strategy: str = DEFAULT_STRATEGY,
        analytics_timezone: str = ANALYTICS_TIMEZONE,
        clock: Callable[[], datetime] = utcnow,
    ):
        if batch_limit < 1:
            raise ValueError(f"batch_limit must be at least 1, got {batch_limit}")
        self.store = ProjectStore(session_factory)
        self.registry = StrategyRegistry(default_key=default_strategy)
        self.batch_limit = batch_limit
        self.timezone = pytz.timezone(analytics_timezone)
        self.clock = clock
        # Serializes create/update/delete, execution and expiry sweeps
        self._write_lock = threading.RLock()

    # ================================
    # PROJECTS
    # ================================

    def list_projects(self) -> List[ProjectSnapshot]:
        return self.store.list_all()

    def get_project(self, project_id: int) -> ProjectSnapshot:
        project = self.store.get(project_id)
        if project is None:
            raise NotFound(f"Project not found: {project_id}")
        return project

    def create_project(self, title, deadline, expected_revenue) -> ProjectSnapshot:
        title, deadline, revenue = validate_project_fields(title, deadline, expected_revenue)
        with self._write_lock:
            project = self.store.add(title, deadline, revenue, created_at=self.clock())
        logger.info(f"Created project {project.id} '{project.title}' (deadline={deadline}, revenue={revenue})")
        return project

    def update_project(self, project_id: int, title, deadline, expected_revenue) -> ProjectSnapshot:
        title, deadline, revenue = validate_project_fields(title, deadline, expected_revenue)
        with self._write_lock:
            self._require_pending(project_id, "updated")
            project = self.store.update_pending(project_id, title, deadline, revenue)
            if project is None:
                raise ConcurrencyConflict(f"Project {project_id} changed while it was being updated")
        logger.info(f"Updated project {project_id}")
        return project

    def delete_project(self, project_id: int) -> None:
        with self._write_lock:
            self._require_pending(project_id, "deleted")
            if not self.store.delete_pending(project_id):
                raise ConcurrencyConflict(f"Project {project_id} changed while it was being deleted")
        logger.info(f"Deleted project {project_id}")

    def _require_pending(self, project_id: int, action: str) -> ProjectSnapshot:
        project = self.get_project(project_id)
        if project.status != ProjectStatus.PENDING:
            raise ValidationError(f"Only pending projects can be {action}; project {project_id} is {project.status.value}")
        return project

    # ================================
    # STRATEGY SELECTION
    # ================================

    def current_strategy(self) -> Strategy:
        return self.registry.current()

    def set_strategy(self, key: str) -> Strategy:
        strategy = self.registry.select(key)
        logger.info(f"Scheduling strategy set to '{strategy.key}'")
        return strategy

    def list_strategies(self) -> List[Strategy]:
        return self.registry.all()

    # ================================
    # SCHEDULE & PREDICTION
    # ================================

    def current_schedule(self) -> ComputedSchedule:
        """Apply the current strategy to a fresh snapshot. Read-only."""
        strategy = self.registry.current()
        snapshot = self.store.pending_snapshot()
        return ComputedSchedule(strategy, self.batch_limit, strategy.compute(snapshot, self.batch_limit))

    def predictions(self) -> Prediction:
        """Run every registered strategy against one snapshot and rank them."""
        snapshot = self.store.pending_snapshot()
        return predict(snapshot, self.batch_limit, self.registry.all())

    # ================================
    # EXECUTION
    # ================================

    def execute(self) -> ExecutionResult:
        """
        Recompute the schedule from a snapshot taken under the write lock and
        commit it: every scheduled project becomes COMPLETED, all at once or not at all.
        Unscheduled projects stay PENDING.
        """
        with self._write_lock:
            strategy = self.registry.current()
            snapshot = self.store.pending_snapshot()
            result = strategy.compute(snapshot, self.batch_limit)
            now = self.clock()
            try:
                self.store.complete(result.project_ids, now)
            except SchedulingError as e:
                logger.error(f"❌ Execution with '{strategy.key}' failed, nothing committed: {e}")
                raise

        logger.info(
            f"✅ Executed '{strategy.key}' schedule: {result.projects_scheduled} projects completed, "
            f"revenue realized {result.total_revenue}"
        )
        committed = replace(
            result,
            slots={
                slot: replace(project, status=ProjectStatus.COMPLETED, completed_at=now)
                for slot, project in result.slots.items()
            },
        )
        return ExecutionResult(strategy, self.batch_limit, committed, now)

    # ================================
    # DEADLINE EXPIRY
    # ================================

    def is_past_deadline(self, project: ProjectSnapshot, now: Optional[datetime] = None) -> bool:
        return is_past_deadline(project, now or self.clock())

    def sweep_expired(self, now: Optional[datetime] = None) -> List[int]:
        """Move every PENDING project whose deadline has passed to NOT_COMPLETED."""
        now = now or self.clock()
        with self._write_lock:
            expired = [p.id for p in self.store.pending_snapshot() if is_past_deadline(p, now)]
            self.store.expire(expired)
        if expired:
            logger.info(f"Expired {len(expired)} projects past their deadline: {expired}")
        return expired

    # ================================
    # STATS & ANALYTICS
    # ================================

    def stats(self, now: Optional[datetime] = None) -> RevenueStats:
        now = now or self.clock()
        week_start = now - timedelta(days=WEEK_DAYS)
        monthly = self.store.completed_since(now - timedelta(days=MONTH_DAYS))
        weekly = [p for p in monthly if p.completed_at >= week_start]
        return RevenueStats(
            weekly_revenue=sum((p.expected_revenue for p in weekly), Decimal("0")),
            monthly_revenue=sum((p.expected_revenue for p in monthly), Decimal("0")),
            projects_completed_this_week=len(weekly),
            projects_completed_this_month=len(monthly),
        )

    def analytics(self, now: Optional[datetime] = None, days: int = ANALYTICS_DAYS) -> List[DailyRevenue]:
        """
        Completed revenue per calendar day (in the analytics timezone) for the last
        `days` days including today, oldest first. Days without completions are zero.
        """
        now = now or self.clock()
        today = pytz.utc.localize(now).astimezone(self.timezone).date()
        first_day = today - timedelta(days=days - 1)

        window_start = self.timezone.localize(datetime.combine(first_day, time.min))
        since = window_start.astimezone(pytz.utc).replace(tzinfo=None)

        buckets = {first_day + timedelta(days=offset): Decimal("0") for offset in range(days)}
        for project in self.store.completed_since(since):
            day = pytz.utc.localize(project.completed_at).astimezone(self.timezone).date()
            if day in buckets:
                buckets[day] += project.expected_revenue

        return [DailyRevenue(day=day, revenue=revenue) for day, revenue in sorted(buckets.items())]


# Default engine instance used by the HTTP layer and the Celery tasks
scheduling_service = SchedulingService(SessionLocal)


def get_scheduling_service() -> SchedulingService:
    return scheduling_service
