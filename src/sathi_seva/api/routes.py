"""API routes for the Sathi Seva marketplace."""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from sathi_seva import __version__
from sathi_seva.api.dependencies import get_current_user, get_marketplace
from sathi_seva.api.models import (
    ApplyRequest,
    DecisionRequest,
    HealthCheck,
    ProfileUpdateRequest,
    StatusChangeRequest,
    TagSuggestRequest,
    TagSuggestResponse,
)
from sathi_seva.container import Marketplace
from sathi_seva.core.errors import FailureKind
from sathi_seva.core.models import (
    ApplyResult,
    DecisionResult,
    Job,
    JobApplication,
    JobDraft,
    JobResult,
    ScheduleEntry,
    UserProfile,
)
from sathi_seva.utils.logging import get_logger

logger = get_logger(__name__)

FAILURE_STATUS_CODES = {
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.VALIDATION_FAILURE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureKind.DEPENDENCY_FAILURE: status.HTTP_502_BAD_GATEWAY,
}

# Create routers
jobs_router = APIRouter(prefix="/jobs", tags=["jobs"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])
schedule_router = APIRouter(prefix="/schedule", tags=["schedule"])
profile_router = APIRouter(prefix="/profile", tags=["profile"])
tags_router = APIRouter(prefix="/tags", tags=["tags"])
health_router = APIRouter(prefix="/health", tags=["health"])


def raise_for_failure(kind: Optional[FailureKind], message: Optional[str]) -> None:
    raise HTTPException(
        status_code=FAILURE_STATUS_CODES.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=message or "Request failed"
    )


async def load_profile(marketplace: Marketplace, user_id: str) -> UserProfile:
    profile = await marketplace.profiles.get_or_create(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Profile store unavailable")
    return profile


async def require_job_owner(marketplace: Marketplace, job_id: str, user_id: str) -> Job:
    job = await marketplace.job_repository.find_by_id(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Job {job_id} not found")
    if job.client_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the job's poster can do this")
    return job


@jobs_router.get("/feed", response_model=List[Job])
async def get_feed(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Available jobs matching the caller's skills."""
    profile = await marketplace.profiles.get_or_create(user_id)
    if profile is None:
        logger.warning("Feed degraded to empty, profile unavailable", user_id=user_id)
        return []
    return await marketplace.matching.get_feed(user_id, profile.skills)


@jobs_router.get("/locality", response_model=List[Job])
async def get_locality_jobs(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Available jobs posted from the caller's city or locality."""
    profile = await marketplace.profiles.get_or_create(user_id)
    if profile is None:
        logger.warning("Locality view degraded to empty, profile unavailable", user_id=user_id)
        return []
    return await marketplace.matching.get_jobs_in_same_locality(user_id, profile.city, profile.locality)


@jobs_router.get("/nearby", response_model=List[Job])
async def get_nearby_jobs(
    radius_km: Optional[float] = Query(None, gt=0, description="Search radius in kilometres"),
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Available jobs posted within a radius of the caller's stored position."""
    profile = await load_profile(marketplace, user_id)
    if profile.coordinates is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Profile has no coordinates")
    return await marketplace.matching.get_nearby_jobs(user_id, profile.coordinates, radius_km)


@jobs_router.get("/mine", response_model=List[Job])
async def get_my_jobs(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Jobs the caller posted or was assigned."""
    return await marketplace.jobs.list_for_user(user_id)


@jobs_router.post("", response_model=JobResult, status_code=status.HTTP_201_CREATED)
async def create_job(
    draft: JobDraft,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Post a new job."""
    result = await marketplace.jobs.create_job(user_id, draft)
    if not result.success:
        raise_for_failure(result.failure_kind, result.error_message)
    return result


@jobs_router.post("/{job_id}/status", response_model=JobResult)
async def change_job_status(
    job_id: str,
    request: StatusChangeRequest,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Move a job through its lifecycle."""
    result = await marketplace.jobs.transition(job_id, request.status, actor_id=user_id)
    if not result.success:
        raise_for_failure(result.failure_kind, result.error_message)
    return result


@jobs_router.post("/{job_id}/apply", response_model=ApplyResult, status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: str,
    request: Optional[ApplyRequest] = None,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Apply to a job. Failures still report the resolved employer."""
    result = await marketplace.applications.apply(job_id, user_id, request.message if request else None)
    if not result.success:
        return JSONResponse(
            status_code=FAILURE_STATUS_CODES[result.failure_kind],
            content=result.model_dump(mode="json")
        )
    return result


@jobs_router.get("/{job_id}/applications", response_model=List[JobApplication])
async def get_job_applications(
    job_id: str,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Applicants for one of the caller's jobs."""
    await require_job_owner(marketplace, job_id, user_id)
    return await marketplace.applications.list_for_job(job_id)


@applications_router.get("", response_model=List[JobApplication])
async def get_my_applications(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """The caller's applications, most recent first."""
    return await marketplace.applications.list_for_worker(user_id)


@applications_router.post("/{application_id}/decision", response_model=DecisionResult)
async def decide_application(
    application_id: str,
    request: DecisionRequest,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Accept or reject an application to one of the caller's jobs."""
    application = await marketplace.application_repository.find_by_id(application_id)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Application {application_id} not found")
    await require_job_owner(marketplace, application.job_id, user_id)

    result = await marketplace.applications.decide(application_id, request.decision)
    if not result.success:
        raise_for_failure(result.failure_kind, result.error_message)

    logger.info("Decision recorded via API", application_id=application_id, decision=request.decision, user_id=user_id)
    return result


@schedule_router.get("", response_model=List[ScheduleEntry])
async def get_schedule(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """The caller's applied jobs with pending/over status."""
    return await marketplace.applications.build_schedule(user_id)


@profile_router.get("", response_model=UserProfile)
async def get_profile(
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """The caller's profile, created on first visit."""
    return await load_profile(marketplace, user_id)


@profile_router.patch("", response_model=UserProfile)
async def update_profile(
    request: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Edit the caller's profile."""
    profile = await marketplace.profiles.update_profile(user_id, **request.model_dump(exclude_unset=True))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Profile update failed")
    return profile


@tags_router.post("/suggest", response_model=TagSuggestResponse)
async def suggest_tags(
    request: TagSuggestRequest,
    user_id: str = Depends(get_current_user),
    marketplace: Marketplace = Depends(get_marketplace)
):
    """Suggest required tags for a job draft."""
    tags = await marketplace.jobs.suggest_tags(request.title, request.description, request.existing_tags)
    return TagSuggestResponse(tags=tags)


@health_router.get("", response_model=HealthCheck)
async def health_check(marketplace: Marketplace = Depends(get_marketplace)):
    """Service health."""
    components = {
        "repositories": "healthy",
        "tag_suggestion": "gemini" if marketplace.tag_suggester.api_key else "fallback",
    }
    return HealthCheck(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        components=components
    )


# Export all routers
all_routers = [
    jobs_router,
    applications_router,
    schedule_router,
    profile_router,
    tags_router,
    health_router,
]
