"""Skill-tag overlap between workers and jobs."""

from typing import Iterable, List

from sathi_seva.core.models import Job


def matches(worker_skills: Iterable[str], required_tags: Iterable[str]) -> bool:
    """True when the worker has at least one of the required tags.

    Comparison is exact and case-sensitive; empty inputs never match.
    """
    return not set(worker_skills).isdisjoint(required_tags)


def filter_jobs(worker_skills: Iterable[str], jobs: Iterable[Job]) -> List[Job]:
    """Keep the jobs whose required tags overlap the worker's skills."""
    skills = frozenset(worker_skills)
    return [job for job in jobs if matches(skills, job.required_tags)]
