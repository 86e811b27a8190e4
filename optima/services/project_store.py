"""
SQLAlchemy-backed project store.

Every read opens a short-lived session and returns detached ProjectSnapshot
values, so callers never hold a session across a scheduling computation.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import ConcurrencyConflict, PersistenceFailure
from ..models import Project, ProjectStatus, utcnow
from ..scheduling.core.snapshot import ProjectSnapshot

logger = logging.getLogger(__name__)


class ProjectStore:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    @contextmanager
    def session(self):
        db: Session = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def transaction(self, action: str):
        """Commit on success; roll back and raise PersistenceFailure on any database error."""
        with self.session() as db:
            try:
                yield db
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"❌ Rolled back {action}: {e}")
                raise PersistenceFailure(f"Could not {action}: {e.__class__.__name__}") from e
            except Exception:
                db.rollback()
                raise

    # ================================
    # READS
    # ================================

    def list_all(self) -> List[ProjectSnapshot]:
        with self.session() as db:
            projects = db.scalars(select(Project).order_by(Project.id)).all()
            return [ProjectSnapshot.from_model(p) for p in projects]

    def get(self, project_id: int) -> Optional[ProjectSnapshot]:
        with self.session() as db:
            project = db.get(Project, project_id)
            return ProjectSnapshot.from_model(project) if project else None

    def pending_snapshot(self) -> List[ProjectSnapshot]:
        """All PENDING projects, read in a single statement, ordered by id."""
        with self.session() as db:
            projects = db.scalars(
                select(Project).where(Project.status == ProjectStatus.PENDING).order_by(Project.id)
            ).all()
            return [ProjectSnapshot.from_model(p) for p in projects]

    def completed_since(self, since: datetime) -> List[ProjectSnapshot]:
        with self.session() as db:
            projects = db.scalars(
                select(Project)
                .where(Project.status == ProjectStatus.COMPLETED, Project.completed_at >= since)
                .order_by(Project.completed_at, Project.id)
            ).all()
            return [ProjectSnapshot.from_model(p) for p in projects]

    def count(self) -> int:
        with self.session() as db:
            return db.scalar(select(func.count()).select_from(Project))

    # ================================
    # WRITES
    # ================================

    def add(self, title: str, deadline: int, expected_revenue: Decimal, created_at: Optional[datetime] = None) -> ProjectSnapshot:
        with self.transaction("create project") as db:
            project = Project(
                title=title,
                deadline=deadline,
                expected_revenue=expected_revenue,
                status=ProjectStatus.PENDING,
                created_at=created_at or utcnow(),
            )
            db.add(project)
            db.flush()
            snapshot = ProjectSnapshot.from_model(project)
        return snapshot

    def add_many(self, rows: Iterable[Dict]) -> int:
        """Bulk insert of prepared rows (used for demo data)."""
        projects = [Project(**row) for row in rows]
        with self.transaction("insert projects") as db:
            db.add_all(projects)
        return len(projects)

    def update_pending(self, project_id: int, title: str, deadline: int, expected_revenue: Decimal) -> Optional[ProjectSnapshot]:
        """Edit a project only while it is still PENDING; None if it is not."""
        with self.transaction("update project") as db:
            project = db.get(Project, project_id)
            if project is None or project.status != ProjectStatus.PENDING:
                return None
            project.title = title
            project.deadline = deadline
            project.expected_revenue = expected_revenue
            db.flush()
            snapshot = ProjectSnapshot.from_model(project)
        return snapshot

    def delete_pending(self, project_id: int) -> bool:
        with self.transaction("delete project") as db:
            project = db.get(Project, project_id)
            if project is None or project.status != ProjectStatus.PENDING:
                return False
            db.delete(project)
        return True

    def complete(self, project_ids: Iterable[int], completed_at: datetime) -> int:
        """Mark every given project COMPLETED in one transaction, or none of them."""
        return self._transition(
            project_ids,
            "complete projects",
            status=ProjectStatus.COMPLETED,
            completed_at=completed_at,
        )

    def expire(self, project_ids: Iterable[int]) -> int:
        """Mark every given project NOT_COMPLETED in one transaction, or none of them."""
        return self._transition(project_ids, "expire projects", status=ProjectStatus.NOT_COMPLETED)

    def _transition(self, project_ids: Iterable[int], action: str, **values) -> int:
        ids = sorted(set(project_ids))
        if not ids:
            return 0

        with self.transaction(action) as db:
            result = db.execute(
                update(Project)
                .where(Project.id.in_(ids), Project.status == ProjectStatus.PENDING)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            # Every targeted row must still exist and still be PENDING
            if result.rowcount != len(ids):
                raise ConcurrencyConflict(
                    f"Could not {action}: {len(ids) - result.rowcount} of {len(ids)} projects "
                    f"were removed or changed concurrently"
                )
        return len(ids)
