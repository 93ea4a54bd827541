"""
Capture Service.

Single entry point for logging something against a project. One capture
always writes an Entry and, depending on its kind, also a Commitment or a
Reflection.

Write order:
    1. Entry                      commit point; failure → nothing persisted
    2. project.last_active_at     only ever moves forward
    3. Commitment                 kind == "commitment"
    4. Reflection                 kind == "reflection" with Q&A or period fields

Steps 2-4 commit individually. A database failure in one of them is rolled
back, logged and recorded; the remaining steps still run. When anything
failed the caller gets a PartialCaptureError carrying the CaptureResult, so
the missing piece can be retried on its own against the saved entry
(POST /commitments or POST /reflections with entry_id).

Functions:
    - validate_capture_input:  Normalise + validate the raw payload
    - capture:                 Run the capture saga
    - list_captures:           Project timeline (newest first)
    - get_capture:             Single entry
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from leaderdojo.core.exceptions import NotFoundError, PartialCaptureError, ValidationError
from leaderdojo.models import db
from leaderdojo.models.commitment import COMMITMENT_DIRECTIONS, DEFAULT_IMPORTANCE, DEFAULT_URGENCY
from leaderdojo.models.reflection import PERIOD_TYPES
from leaderdojo.repositories import (
    CommitmentsRepository,
    EntriesRepository,
    ProjectsRepository,
    ReflectionsRepository,
)
from leaderdojo.services.helpers.validation import (
    optional_date,
    optional_datetime,
    optional_text,
    require_choice,
    require_text,
    require_uuid,
    score,
)
from leaderdojo.utils.helpers import utcnow

logger = logging.getLogger(__name__)

CAPTURE_KINDS = ("meeting", "update", "decision", "note", "prep", "commitment", "reflection")

# Entry kind stored for each capture kind.
_ENTRY_KIND = {
    "meeting": "meeting",
    "update": "update",
    "decision": "decision",
    "note": "note",
    "prep": "prep",
    "commitment": "note",
    "reflection": "reflection",
}


@dataclass
class CaptureResult:
    entry_id: str
    commitment_id: str | None = None
    reflection_id: str | None = None
    failed_steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = {"entry_id": self.entry_id}
        if self.commitment_id:
            result["commitment_id"] = self.commitment_id
        if self.reflection_id:
            result["reflection_id"] = self.reflection_id
        if self.failed_steps:
            result["failed_steps"] = list(self.failed_steps)
        return result


# ═════════════════════════════════════════════════════════════════════════════
# Validation
# ═════════════════════════════════════════════════════════════════════════════


def _commitment_fields(data: dict, errors: dict) -> dict:
    return {
        "direction": require_choice(
            data.get("direction"), "direction", COMMITMENT_DIRECTIONS, errors, default="i_owe",
        ),
        "counterparty": optional_text(data.get("counterparty"), "counterparty", errors, max_len=180),
        "due_date": optional_date(data.get("due_date"), "due_date", errors),
        "notes": optional_text(data.get("notes"), "notes", errors),
        "importance": score(data.get("importance"), "importance", errors, default=DEFAULT_IMPORTANCE),
        "urgency": score(data.get("urgency"), "urgency", errors, default=DEFAULT_URGENCY),
    }


def validate_reflection_fields(data: dict, errors: dict) -> dict:
    """Q&A pairs plus the period invariant (type ⇒ both bounds, start <= end)."""
    qa_raw = data.get("questions_and_answers")
    pairs = []
    if qa_raw is not None:
        if not isinstance(qa_raw, list):
            errors["questions_and_answers"] = "must be a list of {question, answer}"
        else:
            for index, item in enumerate(qa_raw):
                if (not isinstance(item, dict) or not isinstance(item.get("question"), str)
                        or not item["question"].strip()):
                    errors[f"questions_and_answers[{index}]"] = "question is required"
                    continue
                answer = item.get("answer")
                pairs.append({
                    "question": item["question"].strip(),
                    "answer": answer.strip() if isinstance(answer, str) else "",
                })

    period_type = data.get("period_type") or None
    if period_type is not None and period_type not in PERIOD_TYPES:
        errors["period_type"] = f"must be one of {sorted(PERIOD_TYPES)}"
    period_start = optional_date(data.get("period_start"), "period_start", errors)
    period_end = optional_date(data.get("period_end"), "period_end", errors)

    if period_type:
        if "period_start" not in errors and period_start is None:
            errors["period_start"] = "required when period_type is set"
        if "period_end" not in errors and period_end is None:
            errors["period_end"] = "required when period_type is set"
        if period_start and period_end and period_start > period_end:
            errors["period_end"] = "must not be before period_start"
    elif period_start or period_end:
        errors["period_type"] = "required when period dates are set"

    return {
        "questions_and_answers": pairs,
        "period_type": period_type,
        "period_start": period_start,
        "period_end": period_end,
    }


# Kind-specific field validators; kinds not listed carry no extra fields.
_KIND_FIELDS = {
    "commitment": _commitment_fields,
    "reflection": validate_reflection_fields,
}


def validate_capture_input(data: dict) -> dict:
    """Validate a raw capture payload.

    Returns:
        {"project_id", "kind", "title", "occurred_at", "raw_content", "extra": {...}}

    Raises:
        ValidationError: with one detail per bad field.
    """
    if not isinstance(data, dict):
        raise ValidationError("Capture payload must be a JSON object")

    errors: dict = {}
    kind = data.get("kind")
    if kind not in CAPTURE_KINDS:
        errors["kind"] = "required" if not kind else f"must be one of {list(CAPTURE_KINDS)}"

    cleaned = {
        "project_id": require_uuid(data.get("project_id"), "project_id", errors),
        "kind": kind,
        "title": require_text(data.get("title"), "title", errors, max_len=200),
        "occurred_at": optional_datetime(data.get("occurred_at"), "occurred_at", errors),
        "raw_content": optional_text(data.get("raw_content"), "raw_content", errors),
        "extra": {},
    }
    kind_fields = _KIND_FIELDS.get(kind) if kind in CAPTURE_KINDS else None
    if kind_fields is not None:
        cleaned["extra"] = kind_fields(data, errors)

    if errors:
        raise ValidationError("Invalid capture input", details=errors)
    return cleaned


# ═════════════════════════════════════════════════════════════════════════════
# Capture saga
# ═════════════════════════════════════════════════════════════════════════════


def _run_step(name: str, result: CaptureResult, fn):
    """Run one dependent write in its own transaction; record failure."""
    try:
        value = fn()
        db.session.commit()
        return value
    except SQLAlchemyError:
        db.session.rollback()
        result.failed_steps.append(name)
        logger.exception("Capture step %s failed for entry %s", name, result.entry_id,
                         extra={"entry_id": result.entry_id})
        return None


def capture(user_id: str, data: dict) -> CaptureResult:
    """Persist one capture.

    Raises:
        ValidationError: bad input; nothing persisted.
        NotFoundError: project missing or owned by someone else; nothing persisted.
        PartialCaptureError: entry saved, a dependent write failed.
    """
    cleaned = validate_capture_input(data)
    kind = cleaned["kind"]
    extra = cleaned["extra"]

    projects = ProjectsRepository()
    project = projects.find_by_id(user_id, cleaned["project_id"])
    if project is None:
        raise NotFoundError("Project", cleaned["project_id"])
    project_id = project.id

    occurred_at = cleaned["occurred_at"] or utcnow()
    try:
        entry = EntriesRepository().create(user_id, {
            "project_id": project_id,
            "kind": _ENTRY_KIND[kind],
            "title": cleaned["title"],
            "occurred_at": occurred_at,
            "raw_content": cleaned["raw_content"],
            "is_decision": kind == "decision",
        })
        entry_id = entry.id
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Capture failed: entry insert for project %s", project_id,
                         extra={"user_id": user_id, "project_id": project_id})
        raise
    result = CaptureResult(entry_id=entry_id)

    _run_step(
        "project_last_active", result,
        lambda: projects.advance_last_active(user_id, project_id, occurred_at),
    )

    if kind == "commitment":
        commitment = _run_step("commitment", result, lambda: CommitmentsRepository().create(user_id, {
            "project_id": project_id,
            "entry_id": result.entry_id,
            "title": cleaned["title"],
            "direction": extra["direction"],
            "status": "open",
            "counterparty": extra["counterparty"],
            "due_date": extra["due_date"],
            "notes": extra["notes"],
            "importance": extra["importance"],
            "urgency": extra["urgency"],
            "ai_generated": False,
        }))
        if commitment is not None:
            result.commitment_id = commitment.id

    if kind == "reflection" and (extra["questions_and_answers"] or extra["period_type"]):
        reflection = _run_step("reflection", result, lambda: ReflectionsRepository().create(user_id, {
            "project_id": project_id,
            "entry_id": result.entry_id,
            "period_type": extra["period_type"],
            "period_start": extra["period_start"],
            "period_end": extra["period_end"],
            "stats": {},
            "questions_and_answers": extra["questions_and_answers"],
            "ai_questions": [],
        }))
        if reflection is not None:
            result.reflection_id = reflection.id

    log_extra = {"user_id": user_id, "project_id": project_id, "entry_id": result.entry_id}
    if result.failed_steps:
        logger.warning("Capture partially saved kind=%s failed=%s", kind, result.failed_steps,
                       extra=log_extra)
        raise PartialCaptureError(result, result.failed_steps)

    logger.info("Capture saved kind=%s", kind, extra=log_extra)
    return result


# ═════════════════════════════════════════════════════════════════════════════
# Reads
# ═════════════════════════════════════════════════════════════════════════════


def list_captures(user_id: str, project_id: str, *, limit=None):
    if ProjectsRepository().find_by_id(user_id, project_id) is None:
        raise NotFoundError("Project", project_id)
    return EntriesRepository().list(user_id, project_id=project_id, limit=limit)


def get_capture(user_id: str, entry_id: str):
    entry = EntriesRepository().find_by_id(user_id, entry_id)
    if entry is None:
        raise NotFoundError("Entry", entry_id)
    return entry
