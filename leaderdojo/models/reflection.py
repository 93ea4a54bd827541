"""
LeaderDojo
Reflection model: periodic or ad-hoc self-review.

Reflections are immutable once written. When period_type is set both
period bounds are set and period_start <= period_end.
"""

from leaderdojo.models import db
from leaderdojo.models.base import OwnedModel
from leaderdojo.utils.helpers import iso


# ── Constants ────────────────────────────────────────────────────────────────

PERIOD_TYPES = {"week", "month", "quarter"}


class Reflection(OwnedModel):
    """A saved reflection with its stats snapshot and Q&A pairs."""

    __tablename__ = "reflections"
    __table_args__ = (
        OwnedModel.user_composite_index("reflections", "period_type", "period_start"),
        db.CheckConstraint(
            "period_type IS NULL OR (period_start IS NOT NULL AND period_end IS NOT NULL "
            "AND period_start <= period_end)",
            name="ck_reflections_period",
        ),
    )

    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    entry_id = db.Column(
        db.String(36), db.ForeignKey("project_entries.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    period_type = db.Column(db.String(20), nullable=True)
    period_start = db.Column(db.Date, nullable=True)
    period_end = db.Column(db.Date, nullable=True)
    stats = db.Column(db.JSON, nullable=False, default=dict, comment="key -> count")
    questions_and_answers = db.Column(db.JSON, nullable=False, default=list,
                                      comment="[{question, answer}]")
    ai_questions = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "entry_id": self.entry_id,
            "period_type": self.period_type,
            "period_start": iso(self.period_start),
            "period_end": iso(self.period_end),
            "stats": self.stats or {},
            "questions_and_answers": self.questions_and_answers or [],
            "ai_questions": self.ai_questions or [],
            "created_at": iso(self.created_at),
        }

    def __repr__(self):
        return f"<Reflection {self.period_type or 'ad-hoc'} {self.period_start}>"
