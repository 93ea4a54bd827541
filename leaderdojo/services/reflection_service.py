"""
Reflection Service.

    ReflectionService(gateway).generate(user_id, period_type, period_start, period_end)
        Period stats + AI questions/suggestions. Nothing is persisted; the
        user answers the questions and saves the result.

    save_reflection(user_id, data)    Create an immutable reflection
    list_reflections(user_id, ...)    Newest period first

Period stats:
    meeting_count     meeting entries in the period
    decision_count    entries of kind decision or flagged is_decision
    open_commitments  open commitments due in the period
    waiting_for       of those, waiting_for
    i_owe             of those, i_owe
"""

import logging
from datetime import datetime, time, timezone

from leaderdojo.core.exceptions import NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.repositories import (
    CommitmentsRepository,
    EntriesRepository,
    ProjectsRepository,
    ReflectionsRepository,
)
from leaderdojo.services.capture_service import validate_reflection_fields
from leaderdojo.services.helpers.parallel import run_parallel

logger = logging.getLogger(__name__)


def validate_period(period_type, period_start, period_end) -> tuple:
    errors: dict = {}
    fields = validate_reflection_fields(
        {"period_type": period_type, "period_start": period_start, "period_end": period_end},
        errors,
    )
    if not fields["period_type"] and "period_type" not in errors:
        errors["period_type"] = "required"
    if errors:
        raise ValidationError("Invalid reflection period", details=errors)
    return fields["period_type"], fields["period_start"], fields["period_end"]


def period_stats(entries, commitments) -> dict:
    open_items = [c for c in commitments if c.status == "open"]
    return {
        "meeting_count": sum(1 for e in entries if e.kind == "meeting"),
        "decision_count": sum(1 for e in entries if e.kind == "decision" or e.is_decision),
        "open_commitments": len(open_items),
        "waiting_for": sum(1 for c in open_items if c.direction == "waiting_for"),
        "i_owe": sum(1 for c in open_items if c.direction == "i_owe"),
    }


def timeframe_label(period_type, period_start, period_end) -> str:
    return f"{period_type} {period_start.isoformat()} - {period_end.isoformat()}"


class ReflectionService:
    """AI-assisted reflection prompts.

    Args:
        gateway: AIGateway used for generate_reflection_prompts.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def generate(self, user_id: str, period_type, period_start, period_end) -> dict:
        period_type, start, end = validate_period(period_type, period_start, period_end)
        window_start = datetime.combine(start, time.min, tzinfo=timezone.utc)
        window_end = datetime.combine(end, time.max, tzinfo=timezone.utc)

        reads = run_parallel(
            entries=lambda: EntriesRepository().list(
                user_id, occurred_after=window_start, occurred_before=window_end,
            ),
            commitments=lambda: CommitmentsRepository().list(
                user_id, statuses=["open"], due_after=start, due_before=end,
            ),
        )
        stats = period_stats(reads["entries"], reads["commitments"])
        label = timeframe_label(period_type, start, end)
        prompts = self.gateway.generate_reflection_prompts(label, stats)
        logger.info("Reflection prompts generated for %s", label, extra={"user_id": user_id})
        return {
            "period_type": period_type,
            "period_start": start.isoformat(),
            "period_end": end.isoformat(),
            "stats": stats,
            "questions": list(prompts.questions),
            "suggestions": list(prompts.suggestions),
        }


def _clean_stats(raw) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("stats must be an object", details={"stats": "must be an object"})
    clean = {}
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("stats values must be integers", details={f"stats.{key}": "must be an integer"})
        clean[str(key)] = value
    return clean


def save_reflection(user_id: str, data: dict):
    """Create a reflection. Also the targeted retry path for a failed capture step."""
    errors: dict = {}
    fields = validate_reflection_fields(data, errors)
    ai_questions = data.get("ai_questions") or []
    if not isinstance(ai_questions, list) or not all(isinstance(q, str) for q in ai_questions):
        errors["ai_questions"] = "must be a list of strings"
    if errors:
        raise ValidationError("Invalid reflection input", details=errors)
    stats = _clean_stats(data.get("stats"))

    project_id = data.get("project_id") or None
    entry_id = data.get("entry_id") or None
    if project_id and ProjectsRepository().find_by_id(user_id, project_id) is None:
        raise NotFoundError("Project", project_id)
    if entry_id:
        entry = EntriesRepository().find_by_id(user_id, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        project_id = project_id or entry.project_id

    reflection = ReflectionsRepository().create(user_id, {
        **fields,
        "project_id": project_id,
        "entry_id": entry_id,
        "stats": stats,
        "ai_questions": ai_questions,
    })
    db.session.commit()
    logger.info("Reflection saved id=%s period=%s", reflection.id, fields["period_type"],
                extra={"user_id": user_id, "project_id": project_id})
    return reflection


def list_reflections(user_id: str, *, period_type=None, project_id=None):
    return ReflectionsRepository().list(user_id, period_type=period_type, project_id=project_id)
