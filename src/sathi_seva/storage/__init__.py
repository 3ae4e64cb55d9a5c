"""Repository interfaces and in-memory implementations."""

from .base import ApplicationRepository, JobRepository, ProfileRepository
from .memory import (
    InMemoryApplicationRepository,
    InMemoryJobRepository,
    InMemoryProfileRepository,
)

__all__ = [
    "ApplicationRepository",
    "JobRepository",
    "ProfileRepository",
    "InMemoryApplicationRepository",
    "InMemoryJobRepository",
    "InMemoryProfileRepository",
]
