"""
LeaderDojo
Project model.

A Project is anything a leader tracks over time: a delivery project, a
working relationship, or an area of responsibility. Entries, commitments
and reflections hang off it.

last_active_at only moves forward; see ProjectsRepository.advance_last_active.
"""

from datetime import datetime, timezone

from leaderdojo.models import db
from leaderdojo.models.base import OwnedModel
from leaderdojo.utils.helpers import iso


# ── Constants ────────────────────────────────────────────────────────────────

PROJECT_TYPES = {"project", "relationship", "area"}
PROJECT_STATUSES = {"active", "on_hold", "completed", "archived"}

DEFAULT_PRIORITY = 3
PRIORITY_MIN, PRIORITY_MAX = 1, 5


class Project(OwnedModel):
    """A user-owned project, relationship or area."""

    __tablename__ = "projects"
    __table_args__ = (
        OwnedModel.user_composite_index("projects", "last_active_at"),
        db.CheckConstraint("priority BETWEEN 1 AND 5", name="ck_projects_priority"),
    )

    name = db.Column(db.String(180), nullable=False)
    description = db.Column(db.Text, nullable=True)
    project_type = db.Column("type", db.String(20), nullable=False, default="project")
    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    priority = db.Column(db.Integer, nullable=False, default=DEFAULT_PRIORITY, comment="1-5 scale")
    owner_notes = db.Column(db.Text, nullable=True)
    last_active_at = db.Column(db.DateTime(timezone=True), nullable=True,
                               default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.project_type,
            "status": self.status,
            "priority": self.priority,
            "owner_notes": self.owner_notes,
            "last_active_at": iso(self.last_active_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.name[:40]}>"
