"""
User-scoped repository base.

Every repository query carries the owning user id as a mandatory predicate.
A lookup with the wrong user id is indistinguishable from a missing record:
find_by_id / update return None, list returns [].

Calling any method without a user id is a programming error and raises
ValueError immediately, so an unscoped query never reaches the database.

Repositories flush but never commit. Services own the transaction boundary.

Usage:
    repo = ProjectsRepository()               # uses db.session
    repo = ProjectsRepository(session=other)  # explicit session (worker threads)
    project = repo.find_by_id(user_id, project_id)
"""

import logging

from sqlalchemy import select

from leaderdojo.models import db

logger = logging.getLogger(__name__)

# Columns that are never written through update().
_IMMUTABLE_FIELDS = frozenset({"id", "user_id", "created_at"})


class OwnedRepository:
    """CRUD over one OwnedModel subclass, scoped by user_id."""

    model = None

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # ── Scope guard ──────────────────────────────────────────────────────

    def _scoped(self, user_id):
        if not user_id:
            raise ValueError(
                f"{self.__class__.__name__}: user_id is required for every query"
            )
        return select(self.model).where(self.model.user_id == user_id)

    # ── Reads ────────────────────────────────────────────────────────────

    def find_by_id(self, user_id, record_id):
        """Return the record, or None when missing or owned by someone else."""
        stmt = self._scoped(user_id)
        if not record_id:
            return None
        stmt = stmt.where(self.model.id == str(record_id))
        return self.session.execute(stmt).scalar_one_or_none()

    def _all(self, stmt, limit=None):
        if limit:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    # ── Writes ───────────────────────────────────────────────────────────

    def create(self, user_id, values: dict):
        """Insert one record owned by user_id and flush it."""
        if not user_id:
            raise ValueError(f"{self.__class__.__name__}: user_id is required for create")
        obj = self.model(user_id=user_id, **self._writable(values))
        self.session.add(obj)
        self.session.flush()
        return obj

    def update(self, user_id, record_id, values: dict):
        """Apply ``values`` to the record. Returns None when not found for user_id."""
        obj = self.find_by_id(user_id, record_id)
        if obj is None:
            return None
        for key, value in self._writable(values).items():
            setattr(obj, key, value)
        self.session.flush()
        return obj

    def _writable(self, values: dict) -> dict:
        columns = {attr.key for attr in self.model.__mapper__.column_attrs}
        clean = {}
        for key, value in values.items():
            if key in _IMMUTABLE_FIELDS:
                raise ValueError(f"{self.model.__name__}.{key} cannot be written")
            if key not in columns:
                raise ValueError(f"{self.model.__name__} has no column {key!r}")
            clean[key] = value
        return clean
