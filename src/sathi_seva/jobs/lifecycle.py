"""Job posting and status lifecycle."""

from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from sathi_seva.core.errors import FailureKind, InvalidTransitionError, failure_kind_of
from sathi_seva.core.models import Job, JobDraft, JobResult, JobStatus, normalize_tags
from sathi_seva.storage.base import JobRepository
from sathi_seva.tagging.generator import TagSuggester
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)

# ASSIGNED is entered only by accepting an application.
ALLOWED_TRANSITIONS = {
    JobStatus.AVAILABLE: {JobStatus.CANCELLED},
    JobStatus.ASSIGNED: {JobStatus.IN_PROGRESS, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}


def ensure_transition_allowed(current: JobStatus, target: JobStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(f"Cannot move job from {current.value} to {target.value}")


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


class JobService:
    """Creates jobs for clients and moves them through their lifecycle."""

    def __init__(self, job_repository: JobRepository, tag_suggester: TagSuggester):
        self.logger = logger.bind(component="job_service")
        self.jobs = job_repository
        self.tag_suggester = tag_suggester

    async def create_job(self, client_id: str, draft: Union[JobDraft, Dict[str, Any]]) -> JobResult:
        """Validate and post a new available job."""
        if not isinstance(draft, JobDraft):
            try:
                draft = JobDraft.model_validate(draft)
            except ValidationError as e:
                self.logger.warning("Job draft rejected", client_id=client_id, errors=e.error_count())
                return JobResult(
                    success=False,
                    failure_kind=FailureKind.VALIDATION_FAILURE,
                    error_message=_validation_message(e)
                )

        try:
            job = await self.jobs.create(draft, client_id)
        except Exception as e:
            self.logger.error("Job creation failed", **log_error_context(e, client_id=client_id))
            return JobResult(
                success=False,
                failure_kind=failure_kind_of(e),
                error_message=f"Failed to create job: {e}"
            )

        self.logger.info(
            "Job created",
            job_id=job.id,
            client_id=client_id,
            tags_count=len(job.required_tags),
            scheduled_date=job.scheduled_date
        )
        return JobResult(success=True, job=job)

    async def transition(
        self,
        job_id: str,
        target: Union[JobStatus, str],
        actor_id: Optional[str] = None
    ) -> JobResult:
        """
        Move a job to ``target`` if the lifecycle allows it.

        When ``actor_id`` is given it must be the job's client or its
        assigned worker.
        """
        try:
            target = JobStatus(target)
        except ValueError:
            return JobResult(
                success=False,
                failure_kind=FailureKind.VALIDATION_FAILURE,
                error_message=f"Unknown job status: {target!r}"
            )

        try:
            job = await self.jobs.find_by_id(job_id)
        except Exception as e:
            self.logger.error("Job lookup failed", **log_error_context(e, job_id=job_id))
            return JobResult(success=False, failure_kind=failure_kind_of(e), error_message=str(e))

        if job is None:
            return JobResult(
                success=False,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Job {job_id} not found"
            )

        if actor_id is not None and actor_id not in (job.client_id, job.worker_id):
            return JobResult(
                success=False,
                job=job,
                failure_kind=FailureKind.VALIDATION_FAILURE,
                error_message=f"User {actor_id} is not a party to job {job_id}"
            )

        try:
            ensure_transition_allowed(job.status, target)
        except InvalidTransitionError as e:
            self.logger.warning("Job transition refused", job_id=job_id, reason=e.message)
            return JobResult(success=False, job=job, failure_kind=e.kind, error_message=e.message)

        try:
            updated = await self.jobs.update(job_id, {"status": target})
        except Exception as e:
            self.logger.error("Job status update failed", **log_error_context(e, job_id=job_id))
            return JobResult(success=False, job=job, failure_kind=failure_kind_of(e), error_message=str(e))

        if updated is None:
            return JobResult(
                success=False,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Job {job_id} not found"
            )

        self.logger.info(
            "Job status changed",
            job_id=job_id,
            from_status=job.status.value,
            to_status=target.value,
            actor_id=actor_id
        )
        return JobResult(success=True, job=updated)

    async def list_for_user(self, user_id: str) -> List[Job]:
        """Jobs the user posted or works on, newest first."""
        try:
            jobs = await self.jobs.find_for_user(user_id)
        except Exception as e:
            self.logger.error("Failed to list user jobs", **log_error_context(e, user_id=user_id))
            return []
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)

    async def suggest_tags(
        self,
        title: Optional[str],
        description: str,
        existing: Iterable[str] = ()
    ) -> List[str]:
        """Existing tags followed by new suggestions, without duplicates."""
        suggestion = await self.tag_suggester.suggest(description, title)
        return normalize_tags([*existing, *suggestion.tags])
