"""
Export Service.

    export_user_data(user_id) -> {exported_at, projects, entries, commitments, reflections}

Everything the user owns, serialized with the same to_dict() shapes the API
returns. The four table reads run concurrently.
"""

import logging

from leaderdojo.repositories import (
    CommitmentsRepository,
    EntriesRepository,
    ProjectsRepository,
    ReflectionsRepository,
)
from leaderdojo.services.helpers.parallel import run_parallel
from leaderdojo.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def export_user_data(user_id: str) -> dict:
    reads = run_parallel(
        projects=lambda: ProjectsRepository().list(user_id),
        entries=lambda: EntriesRepository().list(user_id),
        commitments=lambda: CommitmentsRepository().list(user_id),
        reflections=lambda: ReflectionsRepository().list(user_id),
    )
    export = {name: [row.to_dict() for row in rows] for name, rows in reads.items()}
    export["exported_at"] = utcnow().isoformat()
    logger.info(
        "Export built: %d projects, %d entries, %d commitments, %d reflections",
        len(export["projects"]), len(export["entries"]),
        len(export["commitments"]), len(export["reflections"]),
        extra={"user_id": user_id},
    )
    return export
