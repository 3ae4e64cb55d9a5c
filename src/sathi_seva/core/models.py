"""Core data models for the Sathi Seva marketplace."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from sathi_seva.core.errors import FailureKind
from sathi_seva.utils.logging import get_logger

logger = get_logger(__name__)


class VerificationStatus(str, Enum):
    """Identity verification state of a profile."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class JobStatus(str, Enum):
    """Canonical job status vocabulary."""
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.CANCELLED)


# Older job-creation code wrote "open" for what is now "available".
LEGACY_JOB_STATUS_ALIASES = {"open": JobStatus.AVAILABLE}


class ApplicationStatus(str, Enum):
    """Application lifecycle state."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ScheduleStatus(str, Enum):
    """Temporal status of a job on a worker's schedule."""
    PENDING = "pending"
    OVER = "over"


def normalize_tags(values: Optional[Iterable[str]]) -> List[str]:
    """Trim tags and drop blanks and duplicates, keeping first-seen order."""
    seen = set()
    tags = []
    for value in values or []:
        tag = value.strip() if isinstance(value, str) else ""
        if tag and tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags


def new_id() -> str:
    return str(uuid4())


class Coordinates(BaseModel):
    """A point on the map."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class AddressDetails(BaseModel):
    """Address fields resolved by reverse geocoding."""
    formatted_address: str = Field("", description="Full display address")
    city: str = Field("", description="City, town or village")
    state: str = Field("", description="State")
    pincode: str = Field("", description="Postal code")
    locality: str = Field("", description="Neighbourhood, suburb or hamlet")
    country: str = Field("", description="Country")


class UserProfile(BaseModel):
    """Marketplace profile of a client or worker."""
    user_id: str = Field(..., description="Identifier issued by the auth provider")
    full_name: Optional[str] = Field(None, description="Display name")
    phone: Optional[str] = Field(None, description="Phone number")
    address: Optional[str] = Field(None, description="Free-text address")
    skills: List[str] = Field(default_factory=list, description="Worker skill tags")
    verification_status: VerificationStatus = Field(
        VerificationStatus.PENDING, description="Verification state"
    )
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State")
    pincode: Optional[str] = Field(None, description="Postal code")
    locality: Optional[str] = Field(None, description="Locality or area")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")
    created_at: datetime = Field(default_factory=datetime.now, description="Profile creation time")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last update time")

    @field_validator("skills", mode="before")
    @classmethod
    def _dedupe_skills(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @property
    def skill_set(self) -> frozenset:
        return frozenset(self.skills)

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class JobDraft(BaseModel):
    """Validated input for posting a new job."""
    title: str = Field(..., description="Job title")
    description: str = Field(..., description="Job description")
    location: str = Field(..., description="Where the work happens")
    amount: float = Field(..., gt=0, description="Payment offered")
    duration: Optional[str] = Field(None, description="Free-text duration, e.g. '2 hours'")
    scheduled_date: str = Field(..., description="Date in YYYY-MM-DD form")
    scheduled_time: Optional[str] = Field(None, description="Time of day in HH:MM form")
    required_tags: List[str] = Field(default_factory=list, description="Skill tags required")

    @field_validator("title", "description", "location")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("scheduled_date")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        value = value.strip()
        date.fromisoformat(value)
        return value

    @field_validator("scheduled_time")
    @classmethod
    def _valid_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        datetime.strptime(value, "%H:%M")
        return value

    @field_validator("duration")
    @classmethod
    def _blank_duration(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("required_tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)


class Job(BaseModel):
    """A job posted by a client."""
    id: str = Field(default_factory=new_id, description="Job identifier")
    client_id: str = Field(..., description="Poster's user id")
    title: str = Field(..., description="Job title")
    description: str = Field("", description="Job description")
    location: str = Field("", description="Free-text location")
    amount: float = Field(..., gt=0, description="Payment offered")
    duration: Optional[str] = Field(None, description="Free-text duration")
    scheduled_date: Optional[str] = Field(None, description="Date as stored, YYYY-MM-DD")
    scheduled_time: Optional[str] = Field(None, description="Time as stored, HH:MM[:SS]")
    required_tags: List[str] = Field(default_factory=list, description="Skill tags required")
    status: JobStatus = Field(JobStatus.AVAILABLE, description="Lifecycle status")
    worker_id: Optional[str] = Field(None, description="Assigned worker's user id")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last update time")

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() in LEGACY_JOB_STATUS_ALIASES:
            canonical = LEGACY_JOB_STATUS_ALIASES[value.lower()]
            logger.warning(
                "Legacy job status normalised",
                legacy_status=value,
                status=canonical.value
            )
            return canonical
        return value

    @field_validator("required_tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @property
    def tag_set(self) -> frozenset:
        return frozenset(self.required_tags)


class JobApplication(BaseModel):
    """A worker's application to a job."""
    id: str = Field(default_factory=new_id, description="Application identifier")
    job_id: str = Field(..., description="Job applied to")
    worker_id: str = Field(..., description="Applying worker's user id")
    status: ApplicationStatus = Field(ApplicationStatus.PENDING, description="Lifecycle status")
    applied_at: datetime = Field(default_factory=datetime.now, description="Application time")
    message: Optional[str] = Field(None, description="Note to the client")


class EmployerInfo(BaseModel):
    """Who posted the job an application targets."""
    client_id: str = Field(..., description="Poster's user id")
    name: Optional[str] = Field(None, description="Poster's display name, if resolvable")


class ScheduleEntry(BaseModel):
    """One row of a worker's schedule."""
    job: Job
    application: JobApplication
    status: ScheduleStatus


class ApplyFailure(str, Enum):
    """Why an apply call did not create an application."""
    JOB_NOT_FOUND = "job_not_found"
    JOB_LOOKUP_FAILED = "job_lookup_failed"
    JOB_NOT_OPEN = "job_not_open"
    DUPLICATE_APPLICATION = "duplicate_application"
    APPLICATION_CREATION_FAILED = "application_creation_failed"

    @property
    def kind(self) -> FailureKind:
        return {
            ApplyFailure.JOB_NOT_FOUND: FailureKind.NOT_FOUND,
            ApplyFailure.JOB_LOOKUP_FAILED: FailureKind.DEPENDENCY_FAILURE,
            ApplyFailure.JOB_NOT_OPEN: FailureKind.VALIDATION_FAILURE,
            ApplyFailure.DUPLICATE_APPLICATION: FailureKind.VALIDATION_FAILURE,
            ApplyFailure.APPLICATION_CREATION_FAILED: FailureKind.DEPENDENCY_FAILURE,
        }[self]


class ApplyResult(BaseModel):
    """Outcome of applying to a job."""
    success: bool = Field(..., description="Whether an application was created")
    application: Optional[JobApplication] = Field(None, description="Created application")
    employer: Optional[EmployerInfo] = Field(None, description="Resolved poster info")
    failure: Optional[ApplyFailure] = Field(None, description="Failure reason")
    error_message: Optional[str] = Field(None, description="Error message if failed")

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        return self.failure.kind if self.failure else None


class DecisionResult(BaseModel):
    """Outcome of accepting or rejecting an application."""
    success: bool = Field(..., description="Whether the decision was recorded")
    application: Optional[JobApplication] = Field(None, description="Application after the decision")
    job: Optional[Job] = Field(None, description="Job after assignment, when accepted")
    failure_kind: Optional[FailureKind] = Field(None, description="Failure category")
    error_message: Optional[str] = Field(None, description="Error message if failed")


class JobResult(BaseModel):
    """Outcome of a job write (create or status change)."""
    success: bool = Field(..., description="Whether the write succeeded")
    job: Optional[Job] = Field(None, description="Job after the write")
    failure_kind: Optional[FailureKind] = Field(None, description="Failure category")
    error_message: Optional[str] = Field(None, description="Error message if failed")


class TagSuggestion(BaseModel):
    """Suggested tags for a job description."""
    tags: List[str] = Field(default_factory=list, description="Suggested tags")
    success: bool = Field(True, description="Whether any strategy produced an answer")
    source: str = Field(..., description="'gemini' or 'fallback'")
    error: Optional[str] = Field(None, description="Why the remote strategy was skipped or failed")
