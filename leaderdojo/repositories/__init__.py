"""User-scoped repositories over the LeaderDojo models."""

from leaderdojo.repositories.commitments import CommitmentsRepository
from leaderdojo.repositories.entries import EntriesRepository
from leaderdojo.repositories.projects import ProjectsRepository
from leaderdojo.repositories.reflections import ReflectionsRepository

__all__ = [
    "CommitmentsRepository",
    "EntriesRepository",
    "ProjectsRepository",
    "ReflectionsRepository",
]
