"""Projects repository."""

from datetime import datetime, timezone

from sqlalchemy import case, or_, update

from leaderdojo.models.project import Project
from leaderdojo.repositories.base import OwnedRepository
from leaderdojo.utils.helpers import ensure_aware


class ProjectsRepository(OwnedRepository):
    model = Project

    def list(self, user_id, *, statuses=None, types=None, min_priority=None, limit=None):
        """List projects, most recently active first; never-active ones last.

        Filters are ANDed; unset filters impose nothing.
        """
        stmt = self._scoped(user_id)
        if statuses:
            stmt = stmt.where(Project.status.in_(list(statuses)))
        if types:
            stmt = stmt.where(Project.project_type.in_(list(types)))
        if min_priority is not None:
            stmt = stmt.where(Project.priority >= min_priority)
        stmt = stmt.order_by(
            case((Project.last_active_at.is_(None), 1), else_=0),
            Project.last_active_at.desc(),
            Project.created_at.desc(),
        )
        return self._all(stmt, limit)

    def advance_last_active(self, user_id, project_id, timestamp: datetime) -> bool:
        """Move last_active_at forward to ``timestamp`` if it is later.

        Single conditional UPDATE, so two concurrent captures cannot move the
        value backwards. Returns True when a row changed.

        The session identity map is not synchronised; the caller's commit
        expires the instance.
        """
        if not user_id:
            raise ValueError("ProjectsRepository: user_id is required for every query")
        ts = ensure_aware(timestamp)
        stmt = (
            update(Project)
            .where(Project.id == project_id, Project.user_id == user_id)
            .where(or_(Project.last_active_at.is_(None), Project.last_active_at < ts))
            .values(last_active_at=ts, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0
