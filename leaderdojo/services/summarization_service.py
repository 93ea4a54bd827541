"""
Entry Summarization Workflow.

    EntrySummarizer(gateway).summarize(user_id, entry_id)
        AI summary + suggested actions for a saved entry. Overwrites
        ai_summary / ai_suggested_actions on success; on AI failure the entry
        is untouched and AIUnavailableError propagates.

    create_commitments_from_suggestions(user_id, entry_id, suggestions, project_id=None)
        Persist the suggestions a human accepted (possibly edited) as
        commitments with ai_generated=True and entry_id set.

Suggestions are validated as a batch before anything is written. Required
fields (title, direction) fail the whole batch. Optional fields degrade
per suggestion: an invalid counterparty, notes or due date is dropped, and
an out-of-range importance or urgency falls back to 3.
"""

import logging

from leaderdojo.core.exceptions import NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.models.commitment import COMMITMENT_DIRECTIONS, DEFAULT_IMPORTANCE, DEFAULT_URGENCY
from leaderdojo.repositories import CommitmentsRepository, EntriesRepository, ProjectsRepository
from leaderdojo.services.helpers.validation import optional_text, require_text, score
from leaderdojo.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def project_context(project) -> str | None:
    """Context block sent with the transcript; None when there is no project."""
    if project is None:
        return None
    lines = [f"Project: {project.name}"]
    if project.description:
        lines.append(f"Description: {project.description}")
    return "\n".join(lines)


class EntrySummarizer:
    """AI summarization of saved entries.

    Args:
        gateway: AIGateway used for the summarize call.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def summarize(self, user_id: str, entry_id: str) -> dict:
        """Summarize one entry and store the result on it.

        Returns:
            {entry_id, summary, key_decisions, open_questions, suggested_actions}

        Raises:
            NotFoundError: entry missing or owned by someone else.
            AIUnavailableError: AI call failed; the entry was not modified.
        """
        entries = EntriesRepository()
        entry = entries.find_by_id(user_id, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)

        project = ProjectsRepository().find_by_id(user_id, entry.project_id)
        raw_text = entry.raw_content or entry.title

        result = self.gateway.summarize_entry(raw_text, project_context=project_context(project))

        actions = [action.to_record() for action in result.suggested_actions]
        entries.update(user_id, entry.id, {
            "ai_summary": result.summary,
            "ai_suggested_actions": actions,
        })
        db.session.commit()
        logger.info("Entry summarized: %d suggested actions", len(actions),
                    extra={"user_id": user_id, "entry_id": entry_id})

        return {
            "entry_id": entry_id,
            "summary": result.summary,
            "key_decisions": list(result.key_decisions),
            "open_questions": list(result.open_questions),
            "suggested_actions": actions,
        }


# ═════════════════════════════════════════════════════════════════════════════
# Accepting suggestions
# ═════════════════════════════════════════════════════════════════════════════


def _field(raw: dict, snake: str, camel: str | None = None):
    if snake in raw:
        return raw[snake]
    return raw.get(camel) if camel else None


def _suggestion_to_values(raw, index: int, errors: dict) -> dict | None:
    prefix = f"actions[{index}]"
    if not isinstance(raw, dict):
        errors[prefix] = "must be an object"
        return None

    local: dict = {}
    title = require_text(raw.get("title"), "title", local, max_len=200)
    direction = raw.get("direction")
    if direction not in COMMITMENT_DIRECTIONS:
        local["direction"] = "required" if not direction else f"must be one of {sorted(COMMITMENT_DIRECTIONS)}"
    if local:
        errors.update({f"{prefix}.{name}": message for name, message in local.items()})
        return None

    dropped: dict = {}
    counterparty = optional_text(raw.get("counterparty"), "counterparty", dropped, max_len=180)
    notes = optional_text(raw.get("notes"), "notes", dropped)
    if dropped:
        logger.warning("Dropping %s on suggestion %d", ", ".join(sorted(dropped)), index)

    raw_due = _field(raw, "due_date", "dueDate")
    due_date = parse_date(raw_due)
    if raw_due and due_date is None:
        logger.warning("Dropping unparseable due date %r on suggestion %d", raw_due, index)

    degraded: dict = {}
    importance = score(raw.get("importance"), "importance", degraded, default=DEFAULT_IMPORTANCE)
    urgency = score(raw.get("urgency"), "urgency", degraded, default=DEFAULT_URGENCY)
    if degraded:
        logger.warning("Defaulting %s on suggestion %d", ", ".join(sorted(degraded)), index)

    return {
        "title": title,
        "direction": direction,
        "counterparty": counterparty,
        "notes": notes,
        "due_date": due_date,
        "importance": importance if importance is not None else DEFAULT_IMPORTANCE,
        "urgency": urgency if urgency is not None else DEFAULT_URGENCY,
    }


def create_commitments_from_suggestions(user_id: str, entry_id: str, suggestions,
                                        project_id: str | None = None):
    """Bulk-create commitments from accepted suggestions.

    Returns:
        The created Commitment rows (empty list for empty input).

    Raises:
        NotFoundError: entry (or explicit project) missing for this user.
        ValidationError: a suggestion lacks title/direction, or project_id
                         does not match the entry's project.
    """
    entry = EntriesRepository().find_by_id(user_id, entry_id)
    if entry is None:
        raise NotFoundError("Entry", entry_id)

    if project_id and project_id != entry.project_id:
        if ProjectsRepository().find_by_id(user_id, project_id) is None:
            raise NotFoundError("Project", project_id)
        raise ValidationError(
            "Entry does not belong to this project",
            details={"project_id": "must match the entry's project"},
        )
    project_id = entry.project_id

    if suggestions is None:
        suggestions = []
    if not isinstance(suggestions, list):
        raise ValidationError("actions must be a list", details={"actions": "must be a list"})
    if not suggestions:
        return []

    errors: dict = {}
    rows = []
    for index, raw in enumerate(suggestions):
        values = _suggestion_to_values(raw, index, errors)
        if values is not None:
            rows.append({
                **values,
                "project_id": project_id,
                "entry_id": entry.id,
                "status": "open",
                "ai_generated": True,
            })
    if errors:
        raise ValidationError("Invalid suggested actions", details=errors)

    created = CommitmentsRepository().create_many(user_id, rows)
    db.session.commit()
    logger.info("Created %d commitments from suggestions", len(created),
                extra={"user_id": user_id, "entry_id": entry_id, "project_id": project_id})
    return created
