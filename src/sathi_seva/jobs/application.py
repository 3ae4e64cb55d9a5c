"""Apply-to-job workflow, decisions and the worker's schedule."""

from datetime import datetime
from typing import List, Optional, Union

from sathi_seva.core.errors import (
    DuplicateApplicationError,
    InvalidTransitionError,
    FailureKind,
    failure_kind_of,
)
from sathi_seva.core.models import (
    ApplicationStatus,
    ApplyFailure,
    ApplyResult,
    DecisionResult,
    EmployerInfo,
    Job,
    JobApplication,
    JobStatus,
    ScheduleEntry,
)
from sathi_seva.jobs.schedule import ScheduleEvaluator
from sathi_seva.storage.base import ApplicationRepository, JobRepository, ProfileRepository
from sathi_seva.utils.logging import get_logger, log_error_context

logger = get_logger(__name__)

DECISIONS = (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


def default_application_message(job_id: str) -> str:
    return f"Application for job {job_id}"


class ApplicationService:
    """Owns the application lifecycle for workers and clients."""

    def __init__(
        self,
        application_repository: ApplicationRepository,
        job_repository: JobRepository,
        profile_repository: ProfileRepository,
        schedule_evaluator: Optional[ScheduleEvaluator] = None
    ):
        self.logger = logger.bind(component="application_service")
        self.applications = application_repository
        self.jobs = job_repository
        self.profiles = profile_repository
        self.schedule = schedule_evaluator or ScheduleEvaluator()

    async def apply(
        self,
        job_id: str,
        worker_id: str,
        message: Optional[str] = None
    ) -> ApplyResult:
        """
        Create a pending application for a job.

        Only available jobs posted by someone else can be applied to.
        Duplicate checks are left to the repository. The employer info is
        returned even when the insert fails, so callers can tell a partial
        failure apart from a missing job.

        Args:
            job_id: Job to apply to
            worker_id: Applying worker
            message: Optional note; defaults to a reference to the job

        Returns:
            ApplyResult with the application and employer on success
        """
        self.logger.info("Applying to job", job_id=job_id, worker_id=worker_id)

        try:
            job = await self.jobs.find_by_id(job_id)
        except Exception as e:
            self.logger.error("Job lookup failed", **log_error_context(e, job_id=job_id))
            return ApplyResult(
                success=False,
                failure=ApplyFailure.JOB_LOOKUP_FAILED,
                error_message=f"Failed to look up job {job_id}: {e}"
            )

        if job is None:
            self.logger.warning("Job not found", job_id=job_id, worker_id=worker_id)
            return ApplyResult(
                success=False,
                failure=ApplyFailure.JOB_NOT_FOUND,
                error_message=f"Job {job_id} not found"
            )

        employer = await self._resolve_employer(job)

        if job.client_id == worker_id or job.status != JobStatus.AVAILABLE:
            reason = (
                "Cannot apply to your own job"
                if job.client_id == worker_id
                else f"Job {job_id} is {job.status.value} and not open for applications"
            )
            self.logger.warning("Application refused", job_id=job_id, worker_id=worker_id, reason=reason)
            return ApplyResult(
                success=False,
                employer=employer,
                failure=ApplyFailure.JOB_NOT_OPEN,
                error_message=reason
            )

        try:
            application = await self.applications.create(
                job_id,
                worker_id,
                message or default_application_message(job_id)
            )
        except DuplicateApplicationError as e:
            self.logger.warning("Duplicate application rejected", job_id=job_id, worker_id=worker_id)
            return ApplyResult(
                success=False,
                employer=employer,
                failure=ApplyFailure.DUPLICATE_APPLICATION,
                error_message=e.message
            )
        except Exception as e:
            self.logger.error(
                "Application creation failed",
                **log_error_context(e, job_id=job_id, worker_id=worker_id)
            )
            return ApplyResult(
                success=False,
                employer=employer,
                failure=ApplyFailure.APPLICATION_CREATION_FAILED,
                error_message=f"Failed to create application: {e}"
            )

        self.logger.info(
            "Application created",
            application_id=application.id,
            job_id=job_id,
            worker_id=worker_id,
            employer_id=employer.client_id
        )
        return ApplyResult(success=True, application=application, employer=employer)

    async def _resolve_employer(self, job: Job) -> EmployerInfo:
        """Poster id plus display name; the name is best-effort."""
        name = None
        try:
            profile = await self.profiles.find_by_user_id(job.client_id)
            if profile is not None:
                name = profile.full_name
        except Exception as e:
            self.logger.warning("Employer name lookup failed", **log_error_context(e, client_id=job.client_id))
        return EmployerInfo(client_id=job.client_id, name=name)

    async def list_for_worker(self, worker_id: str) -> List[JobApplication]:
        """All applications by a worker, most recent first."""
        try:
            applications = await self.applications.find_by_worker(worker_id)
        except Exception as e:
            self.logger.error("Failed to list applications", **log_error_context(e, worker_id=worker_id))
            return []
        return sorted(applications, key=lambda application: application.applied_at, reverse=True)

    async def list_for_job(self, job_id: str) -> List[JobApplication]:
        """Applicants for a job, most recent first."""
        try:
            applications = await self.applications.find_by_job(job_id)
        except Exception as e:
            self.logger.error("Failed to list job applicants", **log_error_context(e, job_id=job_id))
            return []
        return sorted(applications, key=lambda application: application.applied_at, reverse=True)

    async def build_schedule(self, worker_id: str, now: Optional[datetime] = None) -> List[ScheduleEntry]:
        """
        Pair each of the worker's applications with its job and schedule status.

        Applications whose job no longer resolves are omitted.
        """
        applications = await self.list_for_worker(worker_id)
        if not applications:
            return []

        try:
            jobs = await self.jobs.find_by_ids([application.job_id for application in applications])
        except Exception as e:
            self.logger.error("Failed to resolve scheduled jobs", **log_error_context(e, worker_id=worker_id))
            return []

        jobs_by_id = {job.id: job for job in jobs}
        current = now or self.schedule.clock.now()

        entries = []
        for application in applications:
            job = jobs_by_id.get(application.job_id)
            if job is None:
                continue
            entries.append(ScheduleEntry(
                job=job,
                application=application,
                status=self.schedule.status(job, current)
            ))

        self.logger.info(
            "Schedule built",
            worker_id=worker_id,
            applications=len(applications),
            entries=len(entries)
        )
        return entries

    async def decide(
        self,
        application_id: str,
        decision: Union[ApplicationStatus, str]
    ) -> DecisionResult:
        """
        Accept or reject a pending application.

        Repeating the recorded decision is a no-op success; changing a
        recorded decision is refused. Accepting assigns the worker to the job,
        which only succeeds while the job is available and unassigned.
        """
        try:
            target = ApplicationStatus(decision)
        except (ValueError, TypeError):
            target = None
        if target not in DECISIONS:
            return DecisionResult(
                success=False,
                failure_kind=FailureKind.VALIDATION_FAILURE,
                error_message=f"Invalid decision: {decision!r}"
            )

        try:
            application = await self.applications.find_by_id(application_id)
        except Exception as e:
            return self._decision_failure(e, application_id)

        if application is None:
            return DecisionResult(
                success=False,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Application {application_id} not found"
            )

        if application.status == target:
            self.logger.info("Decision already recorded", application_id=application_id, status=target.value)
            return DecisionResult(success=True, application=application)

        if application.status != ApplicationStatus.PENDING:
            return DecisionResult(
                success=False,
                application=application,
                failure_kind=FailureKind.VALIDATION_FAILURE,
                error_message=f"Application already {application.status.value}"
            )

        if target == ApplicationStatus.REJECTED:
            try:
                updated = await self.applications.update_status(application_id, target)
            except Exception as e:
                return self._decision_failure(e, application_id)
            if updated is None:
                return DecisionResult(
                    success=False,
                    failure_kind=FailureKind.NOT_FOUND,
                    error_message=f"Application {application_id} not found"
                )
            self.logger.info("Application rejected", application_id=application_id, job_id=application.job_id)
            return DecisionResult(success=True, application=updated)

        return await self._accept(application)

    async def _accept(self, application: JobApplication) -> DecisionResult:
        """Assign the job to the applicant, then mark the application accepted."""
        try:
            job = await self.jobs.find_by_id(application.job_id)
        except Exception as e:
            return self._decision_failure(e, application.id)

        if job is None:
            return DecisionResult(
                success=False,
                application=application,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Job {application.job_id} not found"
            )

        already_ours = job.status == JobStatus.ASSIGNED and job.worker_id == application.worker_id
        if not already_ours and (job.status != JobStatus.AVAILABLE or job.worker_id):
            self.logger.warning(
                "Accept refused for unavailable job",
                application_id=application.id,
                job_id=job.id,
                job_status=job.status.value,
                assigned_worker=job.worker_id
            )
            return DecisionResult(
                success=False,
                application=application,
                job=job,
                failure_kind=FailureKind.VALIDATION_FAILURE,
                error_message=f"Job {job.id} is {job.status.value} and cannot take another worker"
            )

        # assign_worker re-checks availability under the repository's own lock.
        try:
            assigned = job if already_ours else await self.jobs.assign_worker(job.id, application.worker_id)
        except InvalidTransitionError as e:
            self.logger.warning(
                "Accept lost assignment race",
                application_id=application.id,
                job_id=job.id,
                reason=e.message
            )
            return DecisionResult(
                success=False,
                application=application,
                failure_kind=e.kind,
                error_message=e.message
            )
        except Exception as e:
            return self._decision_failure(e, application.id)

        if assigned is None:
            return DecisionResult(
                success=False,
                application=application,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Job {application.job_id} not found"
            )

        try:
            updated = await self.applications.update_status(application.id, ApplicationStatus.ACCEPTED)
        except Exception as e:
            if not already_ours:
                await self._revert_assignment(job)
            return self._decision_failure(e, application.id)

        if updated is None:
            if not already_ours:
                await self._revert_assignment(job)
            return DecisionResult(
                success=False,
                failure_kind=FailureKind.NOT_FOUND,
                error_message=f"Application {application.id} not found"
            )

        self.logger.info(
            "Application accepted",
            application_id=application.id,
            job_id=job.id,
            worker_id=application.worker_id
        )
        return DecisionResult(success=True, application=updated, job=assigned)

    async def _revert_assignment(self, job: Job) -> None:
        try:
            await self.jobs.update(job.id, {"status": job.status, "worker_id": job.worker_id})
        except Exception as e:
            self.logger.error("Failed to revert job assignment", **log_error_context(e, job_id=job.id))

    def _decision_failure(self, error: Exception, application_id: str) -> DecisionResult:
        self.logger.error("Decision failed", **log_error_context(error, application_id=application_id))
        return DecisionResult(
            success=False,
            failure_kind=failure_kind_of(error),
            error_message=str(error)
        )
