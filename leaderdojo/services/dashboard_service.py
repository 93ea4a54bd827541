"""
Commitment Ranking & Dashboard Aggregation.

Pure functions (no I/O, deterministic for a given input and ``now``):
    - rank_weekly_focus:               Top open i_owe commitments
    - select_idle_projects:            High-priority active projects gone quiet
    - count_decisions_needing_review:  Decision entries still lacking an AI summary
    - count_pending_reflections:       Missing last-week / last-month reflections
    - summarize_stats:                 Headline counters
    - recent_entries:                  Latest activity with project names

Assembler:
    - get_dashboard:  Runs the five independent reads concurrently, then the
                      pure functions over the results.

Thresholds (config):
    WEEKLY_FOCUS_LIMIT         default 5
    IDLE_PROJECT_DAYS          default 45
    IDLE_PROJECT_MIN_PRIORITY  default 3
"""

import logging
from datetime import date, timedelta

from flask import current_app

from leaderdojo.repositories import (
    CommitmentsRepository,
    EntriesRepository,
    ProjectsRepository,
    ReflectionsRepository,
)
from leaderdojo.services.helpers.parallel import run_parallel
from leaderdojo.utils.helpers import ensure_aware, utcnow

logger = logging.getLogger(__name__)

WEEKLY_FOCUS_LIMIT = 5
IDLE_PROJECT_DAYS = 45
IDLE_PROJECT_MIN_PRIORITY = 3
IDLE_PROJECT_LIMIT = 5
RECENT_ENTRY_LIMIT = 5
# self_note entries are private and stay off the activity feed.
RECENT_ENTRY_KINDS = ("meeting", "update", "decision", "note", "prep", "reflection")
UNKNOWN_PROJECT_NAME = "Unknown Project"


# ═════════════════════════════════════════════════════════════════════════════
# Pure ranking functions
# ═════════════════════════════════════════════════════════════════════════════


def _focus_key(commitment):
    due = commitment.due_date
    return (
        -(commitment.importance or 0),
        -(commitment.urgency or 0),
        due is None,
        due or date.max,
    )


def rank_weekly_focus(commitments, limit: int = WEEKLY_FOCUS_LIMIT) -> list:
    """Open i_owe commitments ordered by importance, urgency, then due date.

    Importance and urgency sort descending; due dates ascending with undated
    commitments after dated ones. Ties keep their input order.
    """
    candidates = [c for c in commitments if c.status == "open" and c.direction == "i_owe"]
    return sorted(candidates, key=_focus_key)[:limit]


def select_idle_projects(projects, now, idle_days: int = IDLE_PROJECT_DAYS,
                         min_priority: int = IDLE_PROJECT_MIN_PRIORITY,
                         limit: int = IDLE_PROJECT_LIMIT) -> list:
    """Active projects with priority >= min_priority not touched for idle_days.

    A project qualifies only when last_active_at is strictly older than
    now - idle_days. Projects that were never active are excluded.
    Ordered by priority descending (stable).
    """
    cutoff = ensure_aware(now) - timedelta(days=idle_days)
    idle = [
        p for p in projects
        if p.status == "active"
        and (p.priority or 0) >= min_priority
        and p.last_active_at is not None
        and ensure_aware(p.last_active_at) < cutoff
    ]
    return sorted(idle, key=lambda p: -(p.priority or 0))[:limit]


def count_decisions_needing_review(entries) -> int:
    """Decision-kind entries that have no AI summary yet."""
    return sum(1 for e in entries if e.kind == "decision" and not (e.ai_summary or "").strip())


def previous_week_start(today: date) -> date:
    """Monday of the week before the one containing ``today``."""
    return today - timedelta(days=today.weekday() + 7)


def previous_month_start(today: date) -> date:
    """First day of the calendar month before the one containing ``today``."""
    first_of_month = today.replace(day=1)
    return (first_of_month - timedelta(days=1)).replace(day=1)


def count_pending_reflections(reflections, today: date) -> int:
    """How many of {last week, last month} have no periodic reflection (0-2)."""
    periods = {(r.period_type, r.period_start) for r in reflections if r.period_type}
    pending = 0
    if ("week", previous_week_start(today)) not in periods:
        pending += 1
    if ("month", previous_month_start(today)) not in periods:
        pending += 1
    return pending


def summarize_stats(commitments, projects, reflections, now) -> dict:
    open_items = [c for c in commitments if c.status == "open"]
    latest = max((ensure_aware(r.created_at) for r in reflections if r.created_at), default=None)
    return {
        "open_i_owe": sum(1 for c in open_items if c.direction == "i_owe"),
        "waiting_for": sum(1 for c in open_items if c.direction == "waiting_for"),
        "active_projects": sum(1 for p in projects if p.status == "active"),
        "days_since_reflection": (ensure_aware(now).date() - latest.date()).days if latest else None,
    }


def recent_entries(entries, projects, limit: int = RECENT_ENTRY_LIMIT) -> list:
    """First ``limit`` entries as dicts, each with its project's name added."""
    names = {p.id: p.name for p in projects}
    items = []
    for entry in entries[:limit]:
        item = entry.to_dict()
        item["project_name"] = names.get(entry.project_id, UNKNOWN_PROJECT_NAME)
        items.append(item)
    return items


# ═════════════════════════════════════════════════════════════════════════════
# Assembler
# ═════════════════════════════════════════════════════════════════════════════


def get_dashboard(user_id: str, now=None) -> dict:
    """Weekly focus, idle projects, pending counts, stats and recent activity."""
    now = ensure_aware(now) if now else utcnow()
    config = current_app.config
    idle_days = config.get("IDLE_PROJECT_DAYS", IDLE_PROJECT_DAYS)

    reads = run_parallel(
        commitments=lambda: CommitmentsRepository().list(user_id, statuses=["open"]),
        projects=lambda: ProjectsRepository().list(user_id),
        decisions=lambda: EntriesRepository().list(user_id, kinds=["decision"]),
        reflections=lambda: ReflectionsRepository().list(user_id),
        recent=lambda: EntriesRepository().list(
            user_id, kinds=list(RECENT_ENTRY_KINDS), limit=RECENT_ENTRY_LIMIT,
        ),
    )

    focus = rank_weekly_focus(
        reads["commitments"], limit=config.get("WEEKLY_FOCUS_LIMIT", WEEKLY_FOCUS_LIMIT),
    )
    idle = select_idle_projects(
        reads["projects"], now,
        idle_days=idle_days,
        min_priority=config.get("IDLE_PROJECT_MIN_PRIORITY", IDLE_PROJECT_MIN_PRIORITY),
    )

    idle_items = []
    for project in idle:
        item = project.to_dict()
        item["days_idle"] = (now - ensure_aware(project.last_active_at)).days
        idle_items.append(item)

    logger.debug("Dashboard built: focus=%d idle=%d", len(focus), len(idle),
                 extra={"user_id": user_id})
    return {
        "generated_at": now.isoformat(),
        "weekly_focus": [c.to_dict() for c in focus],
        "idle_projects": idle_items,
        "pending": {
            "decisions_needing_review": count_decisions_needing_review(reads["decisions"]),
            "pending_reflections": count_pending_reflections(reads["reflections"], now.date()),
        },
        "stats": summarize_stats(reads["commitments"], reads["projects"], reads["reflections"], now),
        "recent_entries": recent_entries(reads["recent"], reads["projects"]),
    }
