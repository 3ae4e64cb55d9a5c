"""Data-access interfaces the marketplace services depend on.

Implementations raise ``SathiSevaError`` subclasses (or any exception for
backend faults); services decide whether a failure degrades or surfaces.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from sathi_seva.core.models import (
    ApplicationStatus,
    Job,
    JobApplication,
    JobDraft,
    UserProfile,
)


class JobRepository(ABC):
    """CRUD and queries over job records."""

    @abstractmethod
    async def find_available(self, exclude_client_id: Optional[str] = None) -> List[Job]:
        """Available jobs, newest first, optionally excluding one poster."""

    @abstractmethod
    async def find_by_tags(
        self,
        tags: Iterable[str],
        exclude_client_id: Optional[str] = None
    ) -> List[Job]:
        """Available jobs whose required tags overlap ``tags``, newest first."""

    @abstractmethod
    async def find_by_id(self, job_id: str) -> Optional[Job]:
        ...

    @abstractmethod
    async def find_by_ids(self, job_ids: Iterable[str]) -> List[Job]:
        """Jobs for the ids that exist; unknown ids are skipped."""

    @abstractmethod
    async def find_for_user(self, user_id: str) -> List[Job]:
        """Jobs the user posted or is assigned to, newest first."""

    @abstractmethod
    async def create(self, draft: JobDraft, client_id: str) -> Job:
        ...

    @abstractmethod
    async def update(self, job_id: str, patch: Dict[str, Any]) -> Optional[Job]:
        """Apply a partial update; None when the job does not exist."""

    @abstractmethod
    async def assign_worker(self, job_id: str, worker_id: str) -> Optional[Job]:
        """Atomically assign an available, unassigned job to a worker.

        Assigning a job to the worker who already holds it is a no-op.
        Returns None when the job does not exist.

        Raises:
            InvalidTransitionError: the job is not available or has another worker
        """


class ApplicationRepository(ABC):
    """CRUD over job applications."""

    @abstractmethod
    async def create(
        self,
        job_id: str,
        worker_id: str,
        message: Optional[str] = None
    ) -> JobApplication:
        """Insert a pending application.

        Raises:
            DuplicateApplicationError: the worker already applied to the job
        """

    @abstractmethod
    async def find_by_id(self, application_id: str) -> Optional[JobApplication]:
        ...

    @abstractmethod
    async def find_by_worker(self, worker_id: str) -> List[JobApplication]:
        """Applications by a worker, most recent first."""

    @abstractmethod
    async def find_by_job(self, job_id: str) -> List[JobApplication]:
        """Applications to a job, most recent first."""

    @abstractmethod
    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus
    ) -> Optional[JobApplication]:
        ...


class ProfileRepository(ABC):
    """Lookup and upsert of user profiles."""

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        ...

    @abstractmethod
    async def upsert(self, profile: UserProfile) -> UserProfile:
        ...
