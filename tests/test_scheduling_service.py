"""
Tests for SchedulingService against a real SQLite store.
"""

import threading
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from optima.database import Base, create_db_engine, create_session_factory
from optima.exceptions import ValidationError, NotFound, ConcurrencyConflict, PersistenceFailure
from optima.models import ProjectStatus
from optima.services.scheduling_service import SchedulingService, validate_project_fields


class FailingCommitSession:
    """Wraps a real session; every commit fails as if the database went away."""

    def __init__(self, session):
        self._session = session

    def __getattr__(self, name):
        return getattr(self._session, name)

    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


def add_completed(service, revenue, completed_at, deadline=3):
    service.store.add_many([{
        "title": f"Done {revenue}",
        "deadline": deadline,
        "expected_revenue": Decimal(revenue),
        "status": ProjectStatus.COMPLETED,
        "created_at": completed_at - timedelta(days=1),
        "completed_at": completed_at,
    }])


def statuses(service):
    return {p.id: p.status for p in service.list_projects()}


# ================================
# VALIDATION
# ================================

class TestValidation:
    @pytest.mark.parametrize("title", ["", "   ", None, 42])
    def test_rejects_bad_title(self, service, title):
        with pytest.raises(ValidationError):
            service.create_project(title, 3, 100)
        assert service.store.count() == 0

    @pytest.mark.parametrize("deadline", [0, -1, 366, True, 2.5, "3", None])
    def test_rejects_bad_deadline(self, service, deadline):
        with pytest.raises(ValidationError):
            service.create_project("Site", deadline, 100)
        assert service.store.count() == 0

    @pytest.mark.parametrize("revenue", [-1, "-0.01", "abc", None, float("nan"), float("inf"), "1e20", False])
    def test_rejects_bad_revenue(self, service, revenue):
        with pytest.raises(ValidationError):
            service.create_project("Site", 3, revenue)
        assert service.store.count() == 0

    def test_normalizes_fields(self):
        title, deadline, revenue = validate_project_fields("  Site  ", 365, "12.5")

        assert title == "Site"
        assert deadline == 365
        assert revenue == Decimal("12.50")

    def test_zero_revenue_is_allowed(self, service):
        project = service.create_project("Pro bono", 1, 0)

        assert project.expected_revenue == Decimal("0")


# ================================
# PROJECTS
# ================================

class TestProjects:
    def test_create_assigns_id_status_and_creation_time(self, service, clock):
        project = service.create_project("Website", 3, Decimal("1500.00"))

        assert project.id is not None
        assert project.status == ProjectStatus.PENDING
        assert project.created_at == clock.now
        assert project.completed_at is None
        assert service.get_project(project.id) == project

    def test_ids_are_not_reused_after_delete(self, service):
        first = service.create_project("First", 3, 10)
        service.delete_project(first.id)

        second = service.create_project("Second", 3, 10)

        assert second.id > first.id

    def test_list_orders_by_id(self, service):
        ids = [service.create_project(f"P{i}", 3, i).id for i in range(3)]

        assert [p.id for p in service.list_projects()] == ids

    def test_get_missing_project(self, service):
        with pytest.raises(NotFound):
            service.get_project(404)

    def test_update_pending_project(self, service):
        project = service.create_project("Draft", 3, 10)

        updated = service.update_project(project.id, "Final", 7, "99.90")

        assert updated.title == "Final"
        assert updated.deadline == 7
        assert updated.expected_revenue == Decimal("99.90")
        assert updated.created_at == project.created_at
        assert updated.status == ProjectStatus.PENDING

    def test_update_completed_project_is_rejected(self, service):
        project = service.create_project("Draft", 3, 10)
        service.execute()

        with pytest.raises(ValidationError):
            service.update_project(project.id, "Again", 3, 10)

    def test_update_validates_before_touching_store(self, service):
        project = service.create_project("Draft", 3, 10)

        with pytest.raises(ValidationError):
            service.update_project(project.id, "Draft", 0, 10)

        assert service.get_project(project.id).deadline == 3

    def test_update_missing_project(self, service):
        with pytest.raises(NotFound):
            service.update_project(12, "Ghost", 3, 10)

    def test_delete_missing_project(self, service):
        with pytest.raises(NotFound):
            service.delete_project(12)

    def test_delete_completed_project_is_rejected(self, service):
        project = service.create_project("Shipped", 3, 10)
        service.execute()

        with pytest.raises(ValidationError):
            service.delete_project(project.id)

        assert service.get_project(project.id).status == ProjectStatus.COMPLETED

    def test_deleted_project_leaves_schedule_and_predictions(self, service):
        keep = service.create_project("Keep", 2, 100)
        drop = service.create_project("Drop", 2, 500)

        service.delete_project(drop.id)

        assert service.current_schedule().result.project_ids == (keep.id,)
        for prediction in service.predictions().predictions:
            assert prediction.projected_revenue == Decimal("100")


# ================================
# STRATEGY & SCHEDULE
# ================================

class TestSchedule:
    @pytest.fixture
    def worked_example(self, service):
        return [
            service.create_project("A", 2, 100),
            service.create_project("B", 1, 50),
            service.create_project("C", 2, 80),
        ]

    def test_current_schedule_uses_selected_strategy(self, service, worked_example):
        a, b, c = worked_example

        greedy = service.current_schedule()
        service.set_strategy("edf")
        edf = service.current_schedule()

        assert greedy.strategy.key == "greedy"
        assert {slot: p.id for slot, p in greedy.result.slots.items()} == {1: c.id, 2: a.id}
        assert edf.strategy.key == "edf"
        assert {slot: p.id for slot, p in edf.result.slots.items()} == {1: b.id, 2: a.id}
        assert edf.result.total_revenue == Decimal("150")

    def test_current_schedule_is_read_only(self, service, worked_example):
        before = service.list_projects()

        first = service.current_schedule()
        service.predictions()
        second = service.current_schedule()

        assert first == second
        assert service.list_projects() == before

    def test_unknown_strategy_keeps_current(self, service):
        service.set_strategy("fcfs")

        with pytest.raises(ValidationError):
            service.set_strategy("round-robin")

        assert service.current_strategy().key == "fcfs"

    def test_predictions(self, service, worked_example):
        prediction = service.predictions()

        assert prediction.best_strategy_key == "greedy"
        assert [p.key for p in prediction.predictions] == ["greedy", "priority", "fcfs", "edf"]

    def test_batch_limit_caps_schedule(self, session_factory, clock):
        service = SchedulingService(session_factory, batch_limit=2, clock=clock)
        for i in range(4):
            service.create_project(f"P{i}", 5, 10 * (i + 1))

        schedule = service.current_schedule()

        assert schedule.batch_limit == 2
        assert schedule.result.projects_scheduled == 2
        assert schedule.result.total_revenue == Decimal("70")

    def test_rejects_non_positive_batch_limit(self, session_factory):
        with pytest.raises(ValueError):
            SchedulingService(session_factory, batch_limit=0)


# ================================
# EXECUTION
# ================================

class TestExecute:
    def test_commits_scheduled_projects_only(self, service, clock):
        a = service.create_project("A", 2, 100)
        b = service.create_project("B", 1, 50)
        c = service.create_project("C", 2, 80)

        execution = service.execute()

        assert execution.result.total_revenue == Decimal("180")
        assert execution.completed_at == clock.now
        assert all(p.status == ProjectStatus.COMPLETED for p in execution.result.slots.values())
        assert all(p.completed_at == clock.now for p in execution.result.slots.values())
        assert statuses(service) == {
            a.id: ProjectStatus.COMPLETED,
            b.id: ProjectStatus.PENDING,
            c.id: ProjectStatus.COMPLETED,
        }

    def test_second_execution_schedules_what_is_left(self, service):
        service.create_project("A", 2, 100)
        b = service.create_project("B", 1, 50)
        service.create_project("C", 2, 80)
        service.execute()

        second = service.execute()

        assert second.result.project_ids == (b.id,)

    def test_execute_with_nothing_pending(self, service):
        execution = service.execute()

        assert execution.result.slots == {}
        assert execution.result.total_revenue == Decimal("0")

    def test_execute_is_idempotent_once_drained(self, service):
        service.create_project("Only", 3, 10)
        service.execute()
        after_first = service.list_projects()

        again = service.execute()

        assert again.result.projects_scheduled == 0
        assert service.list_projects() == after_first

    def test_failed_commit_changes_nothing(self, service, session_factory):
        ids = [service.create_project(f"P{i}", 3, 10 + i).id for i in range(3)]
        service.store.session_factory = lambda: FailingCommitSession(session_factory())

        with pytest.raises(PersistenceFailure):
            service.execute()

        service.store.session_factory = session_factory
        assert statuses(service) == {i: ProjectStatus.PENDING for i in ids}
        assert all(p.completed_at is None for p in service.list_projects())

    def test_store_rejects_transition_of_missing_rows(self, service, clock):
        project = service.create_project("Real", 3, 10)

        with pytest.raises(ConcurrencyConflict):
            service.store.complete([project.id, 999], clock.now)

        assert service.get_project(project.id).status == ProjectStatus.PENDING

    def test_store_rejects_transition_of_non_pending_rows(self, service, clock):
        first = service.create_project("First", 3, 10)
        second = service.create_project("Second", 3, 10)
        service.store.complete([first.id], clock.now)

        with pytest.raises(ConcurrencyConflict):
            service.store.expire([first.id, second.id])

        assert statuses(service) == {first.id: ProjectStatus.COMPLETED, second.id: ProjectStatus.PENDING}

    def test_concurrent_executions_never_complete_a_project_twice(self, tmp_path, clock):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'optima.db'}")
        Base.metadata.create_all(engine)
        service = SchedulingService(create_session_factory(engine), batch_limit=5, clock=clock)
        ids = {service.create_project(f"P{i}", 10, 100 + i).id for i in range(8)}

        results, errors = [], []

        def run():
            try:
                results.append(service.execute())
            except Exception as e:  # surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        engine.dispose()

        assert errors == []
        first, second = (set(r.result.project_ids) for r in results)
        assert first.isdisjoint(second)
        assert first | second == ids
        assert sorted(len(r.result.project_ids) for r in results) == [3, 5]


# ================================
# EXPIRY
# ================================

class TestExpiry:
    def test_sweep_marks_overdue_projects(self, service, clock):
        overdue = service.create_project("Rush", 1, 10)
        on_time = service.create_project("Relaxed", 5, 10)
        clock.advance(days=1)

        expired = service.sweep_expired()

        assert expired == [overdue.id]
        assert statuses(service) == {
            overdue.id: ProjectStatus.NOT_COMPLETED,
            on_time.id: ProjectStatus.PENDING,
        }

    def test_expired_projects_leave_the_schedule(self, service, clock):
        overdue = service.create_project("Rush", 1, 1000)
        on_time = service.create_project("Relaxed", 5, 10)
        clock.advance(days=2)
        service.sweep_expired()

        assert service.current_schedule().result.project_ids == (on_time.id,)
        with pytest.raises(ValidationError):
            service.delete_project(overdue.id)

    def test_scheduling_does_not_expire_implicitly(self, service, clock):
        overdue = service.create_project("Rush", 1, 10)
        clock.advance(days=3)

        assert service.is_past_deadline(service.get_project(overdue.id))
        assert service.current_schedule().result.project_ids == (overdue.id,)

    def test_sweep_with_nothing_overdue(self, service):
        service.create_project("Relaxed", 5, 10)

        assert service.sweep_expired() == []


# ================================
# STATS & ANALYTICS
# ================================

class TestStats:
    @pytest.fixture
    def history(self, service, clock):
        now = clock.now
        for days, revenue in [(1, 100), (6, 200), (10, 300), (29, 400), (31, 500)]:
            add_completed(service, revenue, now - timedelta(days=days))
        service.create_project("Not done", 3, 9999)
        return now

    def test_weekly_and_monthly_windows(self, service, history):
        stats = service.stats()

        assert stats.weekly_revenue == Decimal("300")
        assert stats.projects_completed_this_week == 2
        assert stats.monthly_revenue == Decimal("1000")
        assert stats.projects_completed_this_month == 4

    def test_stats_on_empty_store(self, service):
        stats = service.stats()

        assert stats.weekly_revenue == Decimal("0")
        assert stats.projects_completed_this_month == 0

    def test_analytics_is_contiguous(self, service, history):
        series = service.analytics()

        assert len(series) == 30
        assert series[0].day == datetime(2025, 5, 25).date()
        assert series[-1].day == datetime(2025, 6, 23).date()
        days = [point.day for point in series]
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))

        revenue = {point.day.isoformat(): point.revenue for point in series}
        assert revenue["2025-06-22"] == Decimal("100")
        assert revenue["2025-06-17"] == Decimal("200")
        assert revenue["2025-06-13"] == Decimal("300")
        assert revenue["2025-05-25"] == Decimal("400")
        assert revenue["2025-06-23"] == Decimal("0")
        assert sum(revenue.values()) == Decimal("1000")

    def test_analytics_buckets_by_configured_timezone(self, session_factory, clock):
        service = SchedulingService(session_factory, analytics_timezone="America/New_York", clock=clock)
        add_completed(service, 250, datetime(2025, 6, 23, 2, 0))

        series = service.analytics()

        revenue = {point.day.isoformat(): point.revenue for point in series}
        assert revenue["2025-06-22"] == Decimal("250")
        assert revenue["2025-06-23"] == Decimal("0")

    def test_executed_projects_feed_stats(self, service):
        service.create_project("A", 2, 100)
        service.create_project("C", 2, 80)
        service.execute()

        assert service.stats().weekly_revenue == Decimal("180")
        assert service.analytics()[-1].revenue == Decimal("180")
