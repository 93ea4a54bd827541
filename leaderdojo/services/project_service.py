"""
Project Service.

Functions:
    - create_project:   Validate + create (last_active_at starts at creation time)
    - update_project:   Partial update of editable fields
    - get_project:      Get single (user-scoped, NotFoundError otherwise)
    - list_projects:    List with optional status/type/min-priority filters

Projects are never hard-deleted; archive them via status="archived".
"""

import logging

from leaderdojo.core.exceptions import NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.models.project import DEFAULT_PRIORITY, PROJECT_STATUSES, PROJECT_TYPES
from leaderdojo.repositories import ProjectsRepository
from leaderdojo.services.helpers.validation import optional_text, require_choice, require_text, score

logger = logging.getLogger(__name__)


def _clean(data: dict, *, partial: bool) -> dict:
    errors: dict = {}
    values: dict = {}

    if not partial or "name" in data:
        values["name"] = require_text(data.get("name"), "name", errors, max_len=180)
    if "description" in data:
        values["description"] = optional_text(data.get("description"), "description", errors)
    if "owner_notes" in data:
        values["owner_notes"] = optional_text(data.get("owner_notes"), "owner_notes", errors)
    if not partial or "type" in data:
        values["project_type"] = require_choice(
            data.get("type"), "type", PROJECT_TYPES, errors, default=None if partial else "project",
        )
    if not partial or "status" in data:
        values["status"] = require_choice(
            data.get("status"), "status", PROJECT_STATUSES, errors, default=None if partial else "active",
        )
    if not partial or "priority" in data:
        if partial and data.get("priority") is None:
            errors["priority"] = "must be an integer between 1 and 5"
        else:
            values["priority"] = score(data.get("priority"), "priority", errors, default=DEFAULT_PRIORITY)

    if errors:
        raise ValidationError("Invalid project input", details=errors)
    return values


def create_project(user_id: str, data: dict):
    values = _clean(data, partial=False)
    project = ProjectsRepository().create(user_id, values)
    db.session.commit()
    logger.info("Project created id=%s", project.id, extra={"user_id": user_id, "project_id": project.id})
    return project


def update_project(user_id: str, project_id: str, data: dict):
    values = _clean(data, partial=True)
    project = ProjectsRepository().update(user_id, project_id, values)
    if project is None:
        raise NotFoundError("Project", project_id)
    db.session.commit()
    return project


def get_project(user_id: str, project_id: str):
    project = ProjectsRepository().find_by_id(user_id, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def list_projects(user_id: str, *, statuses=None, types=None, min_priority=None):
    for status in statuses or []:
        if status not in PROJECT_STATUSES:
            raise ValidationError("Invalid status filter", details={"status": status})
    for project_type in types or []:
        if project_type not in PROJECT_TYPES:
            raise ValidationError("Invalid type filter", details={"type": project_type})
    return ProjectsRepository().list(
        user_id, statuses=statuses, types=types, min_priority=min_priority,
    )
