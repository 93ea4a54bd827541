"""
Commitment Service.

Functions:
    - create_commitment:   Manual commitment (ai_generated=False), optional entry link
    - get_commitment:      Get single (user-scoped)
    - list_commitments:    Filter by project / direction / status / due window
    - update_commitment:   Partial update of editable fields
    - update_status:       Status transition only

Invariant: completed_at is set iff status == "done". Every status change
goes through apply_status.
"""

import logging

from leaderdojo.core.exceptions import NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.models.commitment import (
    COMMITMENT_DIRECTIONS,
    COMMITMENT_STATUSES,
    DEFAULT_IMPORTANCE,
    DEFAULT_URGENCY,
)
from leaderdojo.repositories import CommitmentsRepository, EntriesRepository, ProjectsRepository
from leaderdojo.services.helpers.validation import (
    optional_date,
    optional_text,
    require_choice,
    require_text,
    score,
)
from leaderdojo.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def apply_status(values: dict, status: str, current=None, now=None) -> dict:
    """Set status + completed_at on ``values`` for a transition to ``status``.

    Moving into "done" stamps completed_at (kept if the commitment was
    already done); any other status clears it.
    """
    values["status"] = status
    if status == "done":
        if current is not None and current.status == "done" and current.completed_at:
            values["completed_at"] = current.completed_at
        else:
            values["completed_at"] = now or utcnow()
    else:
        values["completed_at"] = None
    return values


def _clean(data: dict, *, partial: bool) -> dict:
    errors: dict = {}
    values: dict = {}

    if not partial or "title" in data:
        values["title"] = require_text(data.get("title"), "title", errors, max_len=200)
    if not partial or "direction" in data:
        values["direction"] = require_choice(
            data.get("direction"), "direction", COMMITMENT_DIRECTIONS, errors,
            default=None if partial else "i_owe",
        )
    for name, max_len in (("counterparty", 180), ("notes", None)):
        if name in data:
            values[name] = optional_text(data.get(name), name, errors, max_len=max_len)
    if "due_date" in data:
        values["due_date"] = optional_date(data.get("due_date"), "due_date", errors)
    for name, default in (("importance", DEFAULT_IMPORTANCE), ("urgency", DEFAULT_URGENCY)):
        if not partial or name in data:
            values[name] = score(data.get(name), name, errors, default=default)
    if "status" in data:
        values["status"] = require_choice(data.get("status"), "status", COMMITMENT_STATUSES, errors)

    if errors:
        raise ValidationError("Invalid commitment input", details=errors)
    return values


def create_commitment(user_id: str, data: dict):
    """Create a manual commitment.

    Also the targeted retry path for a capture whose commitment step failed:
    pass the saved entry's id as entry_id.
    """
    values = _clean(data, partial=False)
    project_id = data.get("project_id")
    if not project_id:
        raise ValidationError("project_id is required", details={"project_id": "required"})
    project = ProjectsRepository().find_by_id(user_id, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)

    entry_id = data.get("entry_id")
    if entry_id:
        entry = EntriesRepository().find_by_id(user_id, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        if entry.project_id != project.id:
            raise ValidationError(
                "Entry belongs to a different project",
                details={"entry_id": "must belong to project_id"},
            )

    apply_status(values, values.pop("status", None) or "open")
    values.update({
        "project_id": project.id,
        "entry_id": entry_id or None,
        "ai_generated": False,
    })
    commitment = CommitmentsRepository().create(user_id, values)
    db.session.commit()
    logger.info("Commitment created id=%s", commitment.id,
                extra={"user_id": user_id, "project_id": project_id})
    return commitment


def get_commitment(user_id: str, commitment_id: str):
    commitment = CommitmentsRepository().find_by_id(user_id, commitment_id)
    if commitment is None:
        raise NotFoundError("Commitment", commitment_id)
    return commitment


def list_commitments(user_id: str, *, project_id=None, directions=None, statuses=None,
                     due_after=None, due_before=None):
    errors: dict = {}
    for direction in directions or []:
        require_choice(direction, "direction", COMMITMENT_DIRECTIONS, errors)
    for status in statuses or []:
        require_choice(status, "status", COMMITMENT_STATUSES, errors)
    due_after = optional_date(due_after, "due_after", errors)
    due_before = optional_date(due_before, "due_before", errors)
    if errors:
        raise ValidationError("Invalid commitment filter", details=errors)
    return CommitmentsRepository().list(
        user_id,
        project_id=project_id,
        directions=directions,
        statuses=statuses,
        due_after=due_after,
        due_before=due_before,
    )


def update_commitment(user_id: str, commitment_id: str, data: dict):
    values = _clean(data, partial=True)
    repo = CommitmentsRepository()
    current = repo.find_by_id(user_id, commitment_id)
    if current is None:
        raise NotFoundError("Commitment", commitment_id)
    if "status" in values:
        apply_status(values, values.pop("status"), current=current)
    commitment = repo.update(user_id, commitment_id, values)
    db.session.commit()
    return commitment


def update_status(user_id: str, commitment_id: str, status):
    errors: dict = {}
    status = require_choice(status, "status", COMMITMENT_STATUSES, errors)
    if errors:
        raise ValidationError("Invalid status", details=errors)
    repo = CommitmentsRepository()
    current = repo.find_by_id(user_id, commitment_id)
    if current is None:
        raise NotFoundError("Commitment", commitment_id)
    previous = current.status
    commitment = repo.update(user_id, commitment_id, apply_status({}, status, current=current))
    db.session.commit()
    logger.info("Commitment %s status %s → %s", commitment_id, previous, status,
                extra={"user_id": user_id})
    return commitment
