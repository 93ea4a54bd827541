"""
OwnedModel: Abstract base class for user-owned models.

Every LeaderDojo table belongs to exactly one user. Models inherit from
OwnedModel instead of db.Model directly. This adds:
  - a UUID string primary key
  - user_id column with index (opaque id from the identity provider)
  - Composite index macro helper
"""

import uuid
from datetime import datetime, timezone

from leaderdojo.models import db


def new_id() -> str:
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class OwnedModel(db.Model):
    """Abstract base for user-scoped tables."""
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_now)

    @classmethod
    def user_composite_index(cls, tablename, *extra_cols):
        """Helper to build a (user_id, ...) composite index."""
        name = f"ix_{tablename}_user_{'_'.join(extra_cols)}"
        return db.Index(name, "user_id", *extra_cols)
