"""Personalised job feeds for workers."""

import asyncio
from typing import Callable, Dict, Iterable, List, Optional

from sathi_seva.config import settings
from sathi_seva.core.models import Coordinates, Job, JobStatus, UserProfile
from sathi_seva.jobs.tags import matches
from sathi_seva.location.service import are_in_same_locality
from sathi_seva.storage.base import JobRepository, ProfileRepository
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)


def _same_place(left: Optional[str], right: Optional[str]) -> bool:
    if not left or not right or not left.strip() or not right.strip():
        return False
    return left.strip().casefold() == right.strip().casefold()


class MatchingService:
    """Builds the list of jobs a given viewer may take on."""

    def __init__(self, job_repository: JobRepository, profile_repository: ProfileRepository):
        self.logger = logger.bind(component="matching_service")
        self.jobs = job_repository
        self.profiles = profile_repository

    async def get_feed(self, viewer_id: str, worker_skills: Iterable[str]) -> List[Job]:
        """
        Available jobs for a worker, newest first.

        With skills, only jobs sharing at least one tag are returned; without,
        every available job is. The viewer's own postings never appear.
        Repository failures yield an empty feed.

        Args:
            viewer_id: User id of the worker viewing the feed
            worker_skills: The worker's skill tags

        Returns:
            Jobs ordered by creation time, descending
        """
        skills = frozenset(worker_skills)

        try:
            if skills:
                candidates = await self.jobs.find_by_tags(skills, exclude_client_id=viewer_id)
            else:
                candidates = await self.jobs.find_available(exclude_client_id=viewer_id)
        except Exception as e:
            self.logger.error(
                "Failed to fetch job feed",
                **log_error_context(e, viewer_id=viewer_id, skills_count=len(skills))
            )
            return []

        feed = [
            job for job in candidates
            if job.status == JobStatus.AVAILABLE
            and job.client_id != viewer_id
            and (not skills or matches(skills, job.required_tags))
        ]
        feed.sort(key=lambda job: job.created_at, reverse=True)

        self.logger.info(
            "Job feed built",
            viewer_id=viewer_id,
            skills_count=len(skills),
            candidates=len(candidates),
            jobs=len(feed)
        )
        return feed

    async def get_jobs_in_same_locality(
        self,
        viewer_id: str,
        viewer_city: Optional[str],
        viewer_locality: Optional[str]
    ) -> List[Job]:
        """Available jobs whose poster lives in the viewer's city or locality."""

        def in_same_place(poster: UserProfile) -> bool:
            return _same_place(poster.city, viewer_city) or _same_place(poster.locality, viewer_locality)

        return await self._jobs_by_poster(viewer_id, in_same_place, view="locality")

    async def get_nearby_jobs(
        self,
        viewer_id: str,
        coordinates: Coordinates,
        max_distance_km: Optional[float] = None
    ) -> List[Job]:
        """Available jobs whose poster is within ``max_distance_km`` of the viewer."""
        radius = settings.locality_radius_km if max_distance_km is None else max_distance_km

        def within_radius(poster: UserProfile) -> bool:
            if poster.latitude is None or poster.longitude is None:
                return False
            return are_in_same_locality(
                coordinates.latitude,
                coordinates.longitude,
                poster.latitude,
                poster.longitude,
                max_distance=radius
            )

        return await self._jobs_by_poster(viewer_id, within_radius, view="nearby")

    async def _jobs_by_poster(
        self,
        viewer_id: str,
        keep: Callable[[UserProfile], bool],
        view: str
    ) -> List[Job]:
        """Join available jobs to their posters' profiles and filter in memory."""
        try:
            candidates = await self.jobs.find_available(exclude_client_id=viewer_id)
            posters = await self._resolve_posters({job.client_id for job in candidates})
        except Exception as e:
            self.logger.error("Failed to build poster view", **log_error_context(e, viewer_id=viewer_id, view=view))
            return []

        kept = []
        for job in candidates:
            if job.client_id == viewer_id or job.status != JobStatus.AVAILABLE:
                continue
            poster = posters.get(job.client_id)
            if poster is not None and keep(poster):
                kept.append(job)

        self.logger.info(
            "Poster view built",
            view=view,
            viewer_id=viewer_id,
            candidates=len(candidates),
            posters_resolved=len(posters),
            jobs=len(kept)
        )
        return kept

    async def _resolve_posters(self, client_ids: Iterable[str]) -> Dict[str, UserProfile]:
        """Fetch poster profiles concurrently; unresolvable ones are left out."""
        ids = list(client_ids)
        results = await asyncio.gather(
            *(self.profiles.find_by_user_id(client_id) for client_id in ids),
            return_exceptions=True
        )

        posters = {}
        for client_id, result in zip(ids, results):
            if isinstance(result, Exception):
                self.logger.warning("Poster profile lookup failed", **log_error_context(result, client_id=client_id))
            elif result is not None:
                posters[client_id] = result
        return posters
