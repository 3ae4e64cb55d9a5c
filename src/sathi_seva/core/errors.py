"""Error taxonomy shared by repositories, collaborators and services."""

from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Failure categories carried on service results."""
    NOT_FOUND = "not_found"
    VALIDATION_FAILURE = "validation_failure"
    DEPENDENCY_FAILURE = "dependency_failure"


class SathiSevaError(Exception):
    """Base error for the marketplace core."""

    kind: FailureKind = FailureKind.DEPENDENCY_FAILURE

    def __init__(self, message: str, *, entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id


class NotFoundError(SathiSevaError):
    """A job, application or profile does not exist."""

    kind = FailureKind.NOT_FOUND


class ValidationFailure(SathiSevaError):
    """Malformed input or a disallowed state change."""

    kind = FailureKind.VALIDATION_FAILURE


class DuplicateApplicationError(ValidationFailure):
    """A worker already applied to the job."""


class InvalidTransitionError(ValidationFailure):
    """Job or application status change not allowed by the state machine."""


class DependencyFailure(SathiSevaError):
    """A repository or external API call failed or timed out."""

    kind = FailureKind.DEPENDENCY_FAILURE


def failure_kind_of(error: BaseException) -> FailureKind:
    """Map any exception onto the failure taxonomy."""
    if isinstance(error, SathiSevaError):
        return error.kind
    return FailureKind.DEPENDENCY_FAILURE
