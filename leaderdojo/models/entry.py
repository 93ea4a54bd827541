"""
LeaderDojo
Entry model: timestamped log items on a project.

ai_summary / ai_suggested_actions are written only by the summarization
workflow and are overwritten on every successful re-run.
"""

from datetime import datetime, timezone

from leaderdojo.models import db
from leaderdojo.models.base import OwnedModel
from leaderdojo.utils.helpers import iso


# ── Constants ────────────────────────────────────────────────────────────────

ENTRY_KINDS = {"meeting", "update", "decision", "note", "prep", "reflection", "self_note"}


class Entry(OwnedModel):
    """A meeting, update, decision or note logged against a project."""

    __tablename__ = "project_entries"
    __table_args__ = (
        OwnedModel.user_composite_index("project_entries", "project_id", "occurred_at"),
    )

    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    kind = db.Column(db.String(20), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False,
                            default=lambda: datetime.now(timezone.utc))
    raw_content = db.Column(db.Text, nullable=True)
    ai_summary = db.Column(db.Text, nullable=True)
    ai_suggested_actions = db.Column(db.JSON, nullable=True)
    is_decision = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "kind": self.kind,
            "title": self.title,
            "occurred_at": iso(self.occurred_at),
            "raw_content": self.raw_content,
            "ai_summary": self.ai_summary,
            "ai_suggested_actions": self.ai_suggested_actions,
            "is_decision": bool(self.is_decision),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Entry {self.kind} {self.id}: {self.title[:40]}>"
