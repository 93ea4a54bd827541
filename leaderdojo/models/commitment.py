"""
LeaderDojo
Commitment model: promises tracked in both directions.

Directions:
    i_owe        the user promised something to someone
    waiting_for  someone promised something to the user

Invariant: completed_at is set iff status == "done". Status transitions go
through commitment_service, which maintains it.
"""

from datetime import datetime, timezone

from leaderdojo.models import db
from leaderdojo.models.base import OwnedModel
from leaderdojo.utils.helpers import iso


# ── Constants ────────────────────────────────────────────────────────────────

COMMITMENT_DIRECTIONS = {"i_owe", "waiting_for"}
COMMITMENT_STATUSES = {"open", "done", "blocked", "dropped"}

DEFAULT_IMPORTANCE = 3
DEFAULT_URGENCY = 3


class Commitment(OwnedModel):
    """A tracked promise, optionally traced back to the entry it came from."""

    __tablename__ = "commitments"
    __table_args__ = (
        OwnedModel.user_composite_index("commitments", "status", "direction"),
        db.CheckConstraint("importance BETWEEN 1 AND 5", name="ck_commitments_importance"),
        db.CheckConstraint("urgency BETWEEN 1 AND 5", name="ck_commitments_urgency"),
    )

    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    entry_id = db.Column(
        db.String(36),
        db.ForeignKey("project_entries.id", ondelete="SET NULL"),
        nullable=True, index=True,
        comment="Source entry (capture or accepted AI suggestion)",
    )
    title = db.Column(db.String(200), nullable=False)
    direction = db.Column(db.String(20), nullable=False, default="i_owe")
    status = db.Column(db.String(20), nullable=False, default="open", index=True)
    counterparty = db.Column(db.String(180), nullable=True)
    due_date = db.Column(db.Date, nullable=True)
    importance = db.Column(db.Integer, nullable=False, default=DEFAULT_IMPORTANCE, comment="1-5 scale")
    urgency = db.Column(db.Integer, nullable=False, default=DEFAULT_URGENCY, comment="1-5 scale")
    notes = db.Column(db.Text, nullable=True)
    ai_generated = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "entry_id": self.entry_id,
            "title": self.title,
            "direction": self.direction,
            "status": self.status,
            "counterparty": self.counterparty,
            "due_date": iso(self.due_date),
            "importance": self.importance,
            "urgency": self.urgency,
            "notes": self.notes,
            "ai_generated": bool(self.ai_generated),
            "completed_at": iso(self.completed_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Commitment {self.direction} {self.status}: {self.title[:40]}>"
