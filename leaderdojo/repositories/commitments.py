"""Commitments repository."""

from __future__ import annotations

from sqlalchemy import case

from leaderdojo.models.commitment import Commitment
from leaderdojo.repositories.base import OwnedRepository


class CommitmentsRepository(OwnedRepository):
    model = Commitment

    def list(self, user_id, *, project_id=None, entry_id=None, directions=None,
             statuses=None, due_after=None, due_before=None, limit=None):
        """List commitments by due date, latest first; undated ones last.

        due_after / due_before are inclusive and exclude undated commitments.
        """
        stmt = self._scoped(user_id)
        if project_id:
            stmt = stmt.where(Commitment.project_id == project_id)
        if entry_id:
            stmt = stmt.where(Commitment.entry_id == entry_id)
        if directions:
            stmt = stmt.where(Commitment.direction.in_(list(directions)))
        if statuses:
            stmt = stmt.where(Commitment.status.in_(list(statuses)))
        if due_after is not None:
            stmt = stmt.where(Commitment.due_date >= due_after)
        if due_before is not None:
            stmt = stmt.where(Commitment.due_date <= due_before)
        stmt = stmt.order_by(
            case((Commitment.due_date.is_(None), 1), else_=0),
            Commitment.due_date.desc(),
            Commitment.created_at.desc(),
        )
        return self._all(stmt, limit)

    def create_many(self, user_id, rows: list[dict]):
        """Insert several commitments in one flush. Empty input → []."""
        if not rows:
            return []
        if not user_id:
            raise ValueError("CommitmentsRepository: user_id is required for create")
        created = [Commitment(user_id=user_id, **self._writable(row)) for row in rows]
        self.session.add_all(created)
        self.session.flush()
        return created
