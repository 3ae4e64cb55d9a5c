"""Service wiring for the marketplace."""

from dataclasses import dataclass
from typing import Optional

from sathi_seva.core.clock import Clock, SystemClock
from sathi_seva.jobs.application import ApplicationService
from sathi_seva.jobs.lifecycle import JobService
from sathi_seva.jobs.matcher import MatchingService
from sathi_seva.jobs.schedule import ScheduleEvaluator
from sathi_seva.location.service import LocationService
from sathi_seva.profiles.service import ProfileService
from sathi_seva.storage.base import ApplicationRepository, JobRepository, ProfileRepository
from sathi_seva.storage.memory import (
    InMemoryApplicationRepository,
    InMemoryJobRepository,
    InMemoryProfileRepository,
)
from sathi_seva.tagging.generator import TagSuggester


@dataclass
class Marketplace:
    """All services sharing one set of repositories and one clock."""
    job_repository: JobRepository
    application_repository: ApplicationRepository
    profile_repository: ProfileRepository
    clock: Clock
    tag_suggester: TagSuggester
    location_service: LocationService
    matching: MatchingService
    applications: ApplicationService
    jobs: JobService
    profiles: ProfileService

    async def close(self) -> None:
        await self.tag_suggester.close()
        await self.location_service.close()


def create_marketplace(
    job_repository: Optional[JobRepository] = None,
    application_repository: Optional[ApplicationRepository] = None,
    profile_repository: Optional[ProfileRepository] = None,
    clock: Optional[Clock] = None,
    tag_suggester: Optional[TagSuggester] = None,
    location_service: Optional[LocationService] = None
) -> Marketplace:
    """Build the services; missing repositories default to in-memory ones."""
    job_repository = job_repository or InMemoryJobRepository()
    application_repository = application_repository or InMemoryApplicationRepository()
    profile_repository = profile_repository or InMemoryProfileRepository()
    clock = clock or SystemClock()
    tag_suggester = tag_suggester or TagSuggester()
    location_service = location_service or LocationService()

    return Marketplace(
        job_repository=job_repository,
        application_repository=application_repository,
        profile_repository=profile_repository,
        clock=clock,
        tag_suggester=tag_suggester,
        location_service=location_service,
        matching=MatchingService(job_repository, profile_repository),
        applications=ApplicationService(
            application_repository,
            job_repository,
            profile_repository,
            ScheduleEvaluator(clock)
        ),
        jobs=JobService(job_repository, tag_suggester),
        profiles=ProfileService(profile_repository, location_service),
    )


def create_test_marketplace(clock: Optional[Clock] = None) -> Marketplace:
    """In-memory marketplace with tag suggestion pinned to the local fallback."""
    return create_marketplace(clock=clock, tag_suggester=TagSuggester(api_key=""))
