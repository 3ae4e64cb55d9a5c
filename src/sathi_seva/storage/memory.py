"""In-memory repositories for development and testing."""

import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sathi_seva.core.errors import DuplicateApplicationError, InvalidTransitionError, ValidationFailure
from sathi_seva.core.models import (
    ApplicationStatus,
    Job,
    JobApplication,
    JobDraft,
    JobStatus,
    UserProfile,
)
from sathi_seva.jobs.tags import matches
from sathi_seva.storage.base import ApplicationRepository, JobRepository, ProfileRepository
from sathi_seva.utils.logging import get_logger

logger = get_logger(__name__)


def _newest_jobs_first(jobs: Iterable[Job]) -> List[Job]:
    return sorted(jobs, key=lambda job: job.created_at, reverse=True)


def _newest_applications_first(applications: Iterable[JobApplication]) -> List[JobApplication]:
    return sorted(applications, key=lambda application: application.applied_at, reverse=True)


class InMemoryJobRepository(JobRepository):
    """Job store backed by a dict."""

    def __init__(self, jobs: Iterable[Job] = ()):
        self._jobs: Dict[str, Job] = {job.id: job.model_copy(deep=True) for job in jobs}
        self._lock = asyncio.Lock()
        self.logger = logger.bind(component="memory_job_repository")

    async def find_available(self, exclude_client_id: Optional[str] = None) -> List[Job]:
        return _newest_jobs_first(
            job.model_copy(deep=True)
            for job in self._jobs.values()
            if job.status == JobStatus.AVAILABLE and job.client_id != exclude_client_id
        )

    async def find_by_tags(
        self,
        tags: Iterable[str],
        exclude_client_id: Optional[str] = None
    ) -> List[Job]:
        wanted = frozenset(tags)
        available = await self.find_available(exclude_client_id)
        return [job for job in available if matches(wanted, job.required_tags)]

    async def find_by_id(self, job_id: str) -> Optional[Job]:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def find_by_ids(self, job_ids: Iterable[str]) -> List[Job]:
        return [
            self._jobs[job_id].model_copy(deep=True)
            for job_id in dict.fromkeys(job_ids)
            if job_id in self._jobs
        ]

    async def find_for_user(self, user_id: str) -> List[Job]:
        return _newest_jobs_first(
            job.model_copy(deep=True)
            for job in self._jobs.values()
            if job.client_id == user_id or job.worker_id == user_id
        )

    async def create(self, draft: JobDraft, client_id: str) -> Job:
        now = datetime.now()
        job = Job(
            client_id=client_id,
            status=JobStatus.AVAILABLE,
            created_at=now,
            updated_at=now,
            **draft.model_dump()
        )
        async with self._lock:
            self._jobs[job.id] = job
        self.logger.debug("Job stored", job_id=job.id, client_id=client_id)
        return job.model_copy(deep=True)

    async def update(self, job_id: str, patch: Dict[str, Any]) -> Optional[Job]:
        if "id" in patch and patch["id"] != job_id:
            raise ValidationFailure("Job id cannot be changed", entity_id=job_id)

        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            updated = Job.model_validate({
                **current.model_dump(),
                **patch,
                "updated_at": datetime.now(),
            })
            self._jobs[job_id] = updated
        return updated.model_copy(deep=True)

    async def assign_worker(self, job_id: str, worker_id: str) -> Optional[Job]:
        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            if current.status == JobStatus.ASSIGNED and current.worker_id == worker_id:
                return current.model_copy(deep=True)
            if current.status != JobStatus.AVAILABLE or current.worker_id:
                raise InvalidTransitionError(
                    f"Job {job_id} is {current.status.value} and cannot take another worker",
                    entity_id=job_id
                )
            assigned = current.model_copy(update={
                "status": JobStatus.ASSIGNED,
                "worker_id": worker_id,
                "updated_at": datetime.now(),
            })
            self._jobs[job_id] = assigned
        self.logger.debug("Job assigned", job_id=job_id, worker_id=worker_id)
        return assigned.model_copy(deep=True)


class InMemoryApplicationRepository(ApplicationRepository):
    """Application store enforcing one application per (job, worker)."""

    def __init__(self, applications: Iterable[JobApplication] = ()):
        self._applications: Dict[str, JobApplication] = {
            application.id: application.model_copy(deep=True) for application in applications
        }
        self._lock = asyncio.Lock()
        self.logger = logger.bind(component="memory_application_repository")

    async def create(
        self,
        job_id: str,
        worker_id: str,
        message: Optional[str] = None
    ) -> JobApplication:
        async with self._lock:
            for existing in self._applications.values():
                if existing.job_id == job_id and existing.worker_id == worker_id:
                    raise DuplicateApplicationError(
                        f"Worker {worker_id} already applied to job {job_id}",
                        entity_id=existing.id
                    )
            application = JobApplication(
                job_id=job_id,
                worker_id=worker_id,
                status=ApplicationStatus.PENDING,
                applied_at=datetime.now(),
                message=message
            )
            self._applications[application.id] = application
        self.logger.debug("Application stored", application_id=application.id, job_id=job_id)
        return application.model_copy(deep=True)

    async def find_by_id(self, application_id: str) -> Optional[JobApplication]:
        application = self._applications.get(application_id)
        return application.model_copy(deep=True) if application else None

    async def find_by_worker(self, worker_id: str) -> List[JobApplication]:
        return _newest_applications_first(
            application.model_copy(deep=True)
            for application in self._applications.values()
            if application.worker_id == worker_id
        )

    async def find_by_job(self, job_id: str) -> List[JobApplication]:
        return _newest_applications_first(
            application.model_copy(deep=True)
            for application in self._applications.values()
            if application.job_id == job_id
        )

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus
    ) -> Optional[JobApplication]:
        async with self._lock:
            current = self._applications.get(application_id)
            if current is None:
                return None
            updated = current.model_copy(update={"status": ApplicationStatus(status)})
            self._applications[application_id] = updated
        return updated.model_copy(deep=True)


class InMemoryProfileRepository(ProfileRepository):
    """Profile store keyed by user id."""

    def __init__(self, profiles: Iterable[UserProfile] = ()):
        self._profiles: Dict[str, UserProfile] = {
            profile.user_id: profile.model_copy(deep=True) for profile in profiles
        }
        self._lock = asyncio.Lock()

    async def find_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def upsert(self, profile: UserProfile) -> UserProfile:
        async with self._lock:
            existing = self._profiles.get(profile.user_id)
            stored = profile.model_copy(update={
                "created_at": existing.created_at if existing else profile.created_at,
                "updated_at": datetime.now(),
            })
            self._profiles[profile.user_id] = stored
        return stored.model_copy(deep=True)
