"""
Prep Briefing Generator.

Read-only: builds a pre-meeting briefing for one project from its most
recent meetings/updates/decisions and its open commitments. Nothing is
persisted.
"""

import logging

from flask import current_app

from leaderdojo.repositories import CommitmentsRepository, EntriesRepository, ProjectsRepository
from leaderdojo.services.helpers.parallel import run_parallel
from leaderdojo.utils.helpers import iso

logger = logging.getLogger(__name__)

PREP_ENTRY_KINDS = ("meeting", "update", "decision")
PREP_ENTRY_LIMIT = 10


def entry_content(entry) -> str:
    """AI summary, else raw content, else title. Blank strings are skipped."""
    for candidate in (entry.ai_summary, entry.raw_content, entry.title):
        if candidate and candidate.strip():
            return candidate.strip()
    return entry.title or ""


def briefing_entry(entry) -> dict:
    return {
        "occurred_at": iso(entry.occurred_at),
        "kind": entry.kind,
        "title": entry.title,
        "content": entry_content(entry),
    }


def briefing_commitment(commitment) -> dict:
    return {
        "title": commitment.title,
        "direction": commitment.direction,
        "due_date": iso(commitment.due_date),
        "counterparty": commitment.counterparty,
        "status": commitment.status,
    }


class PrepBriefingGenerator:
    """Generate prep briefings through the AI gateway.

    Args:
        gateway: AIGateway used for generate_prep_briefing.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def generate_briefing(self, user_id: str, project_id: str) -> dict | None:
        """Return the briefing payload, or None when the project does not exist.

        Raises:
            AIUnavailableError: AI call failed.
        """
        project = ProjectsRepository().find_by_id(user_id, project_id)
        if project is None:
            return None
        project_id, project_name = project.id, project.name

        limit = current_app.config.get("PREP_ENTRY_LIMIT", PREP_ENTRY_LIMIT)
        reads = run_parallel(
            entries=lambda: EntriesRepository().list(
                user_id, project_id=project_id, kinds=PREP_ENTRY_KINDS, limit=limit,
            ),
            commitments=lambda: CommitmentsRepository().list(
                user_id, project_id=project_id, statuses=["open"],
            ),
        )
        entries = [briefing_entry(e) for e in reads["entries"][:limit]]
        commitments = [briefing_commitment(c) for c in reads["commitments"]]

        result = self.gateway.generate_prep_briefing(project_name, entries, commitments)
        logger.info("Prep briefing generated from %d entries, %d commitments",
                    len(entries), len(commitments),
                    extra={"user_id": user_id, "project_id": project_id})
        return {
            "project": project.to_dict(),
            "entries": entries,
            "commitments": commitments,
            "briefing": {
                "briefing": result.briefing,
                "talking_points": list(result.talking_points),
            },
        }
