"""Entries repository."""

from leaderdojo.models.entry import Entry
from leaderdojo.repositories.base import OwnedRepository
from leaderdojo.utils.helpers import ensure_aware


class EntriesRepository(OwnedRepository):
    model = Entry

    def list(self, user_id, *, project_id=None, kinds=None, occurred_after=None,
             occurred_before=None, limit=None):
        """List entries, newest occurred_at first.

        occurred_after / occurred_before are inclusive bounds.
        """
        stmt = self._scoped(user_id)
        if project_id:
            stmt = stmt.where(Entry.project_id == project_id)
        if kinds:
            stmt = stmt.where(Entry.kind.in_(list(kinds)))
        if occurred_after is not None:
            stmt = stmt.where(Entry.occurred_at >= ensure_aware(occurred_after))
        if occurred_before is not None:
            stmt = stmt.where(Entry.occurred_at <= ensure_aware(occurred_before))
        stmt = stmt.order_by(Entry.occurred_at.desc(), Entry.created_at.desc())
        return self._all(stmt, limit)

    def delete(self, user_id, entry_id) -> bool:
        """Hard-delete one entry. False when missing or owned by someone else.

        Commitments and reflections pointing at the entry keep their rows;
        the database sets their entry_id to NULL.
        """
        entry = self.find_by_id(user_id, entry_id)
        if entry is None:
            return False
        self.session.delete(entry)
        self.session.flush()
        return True
