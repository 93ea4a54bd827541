"""Reflections repository.

Reflections are written once; the services expose no update path.
"""

from sqlalchemy import case

from leaderdojo.models.reflection import Reflection
from leaderdojo.repositories.base import OwnedRepository


class ReflectionsRepository(OwnedRepository):
    model = Reflection

    def list(self, user_id, *, period_type=None, project_id=None, limit=None):
        stmt = self._scoped(user_id)
        if period_type:
            stmt = stmt.where(Reflection.period_type == period_type)
        if project_id:
            stmt = stmt.where(Reflection.project_id == project_id)
        stmt = stmt.order_by(
            case((Reflection.period_start.is_(None), 1), else_=0),
            Reflection.period_start.desc(),
            Reflection.created_at.desc(),
        )
        return self._all(stmt, limit)

    def find_by_period(self, user_id, period_type, period_start):
        """Most recent reflection for an exact (period_type, period_start)."""
        stmt = (
            self._scoped(user_id)
            .where(Reflection.period_type == period_type)
            .where(Reflection.period_start == period_start)
            .order_by(Reflection.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()
