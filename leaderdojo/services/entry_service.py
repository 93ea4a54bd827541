"""
Entry Service.

Functions:
    - get_entry:         Get single (user-scoped)
    - list_timeline:     Project timeline, newest first, optional kind filter
    - update_entry:      Explicit edit of title / kind / occurred_at / raw_content / is_decision
    - mark_as_decision:  Flag (or unflag) an entry as a decision
    - delete_entry:      Hard delete; linked commitments keep their rows

AI fields are not editable here; only the summarization workflow writes them.
"""

import logging

from leaderdojo.core.exceptions import NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.models.entry import ENTRY_KINDS
from leaderdojo.repositories import EntriesRepository, ProjectsRepository
from leaderdojo.services.helpers.validation import (
    optional_datetime,
    optional_text,
    require_choice,
    require_text,
)

logger = logging.getLogger(__name__)


def get_entry(user_id: str, entry_id: str):
    entry = EntriesRepository().find_by_id(user_id, entry_id)
    if entry is None:
        raise NotFoundError("Entry", entry_id)
    return entry


def list_timeline(user_id: str, project_id: str, *, kinds=None, limit=None):
    if ProjectsRepository().find_by_id(user_id, project_id) is None:
        raise NotFoundError("Project", project_id)
    for kind in kinds or []:
        if kind not in ENTRY_KINDS:
            raise ValidationError("Invalid kind filter", details={"kind": kind})
    return EntriesRepository().list(user_id, project_id=project_id, kinds=kinds, limit=limit)


def update_entry(user_id: str, entry_id: str, data: dict):
    errors: dict = {}
    values: dict = {}
    if "title" in data:
        values["title"] = require_text(data.get("title"), "title", errors, max_len=200)
    if "kind" in data:
        values["kind"] = require_choice(data.get("kind"), "kind", ENTRY_KINDS, errors)
    if "occurred_at" in data:
        occurred_at = optional_datetime(data.get("occurred_at"), "occurred_at", errors)
        if occurred_at is None and "occurred_at" not in errors:
            errors["occurred_at"] = "required"
        values["occurred_at"] = occurred_at
    if "raw_content" in data:
        values["raw_content"] = optional_text(data.get("raw_content"), "raw_content", errors)
    if "is_decision" in data:
        if not isinstance(data["is_decision"], bool):
            errors["is_decision"] = "must be a boolean"
        values["is_decision"] = data["is_decision"]
    if errors:
        raise ValidationError("Invalid entry input", details=errors)

    entry = EntriesRepository().update(user_id, entry_id, values)
    if entry is None:
        raise NotFoundError("Entry", entry_id)
    db.session.commit()
    return entry


def mark_as_decision(user_id: str, entry_id: str, is_decision: bool = True):
    entry = EntriesRepository().update(user_id, entry_id, {"is_decision": bool(is_decision)})
    if entry is None:
        raise NotFoundError("Entry", entry_id)
    db.session.commit()
    logger.info("Entry %s is_decision=%s", entry_id, bool(is_decision), extra={"user_id": user_id})
    return entry


def delete_entry(user_id: str, entry_id: str) -> None:
    """Remove an entry. Linked commitments and reflections survive unlinked."""
    if not EntriesRepository().delete(user_id, entry_id):
        raise NotFoundError("Entry", entry_id)
    db.session.commit()
    logger.info("Entry deleted", extra={"user_id": user_id, "entry_id": entry_id})
