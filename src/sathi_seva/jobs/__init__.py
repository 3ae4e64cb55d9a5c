"""Job matching, scheduling and application system."""

from .tags import matches, filter_jobs
from .duration import parse_minutes
from .schedule import ScheduleEvaluator
from .matcher import MatchingService
from .application import ApplicationService
from .lifecycle import JobService, ALLOWED_TRANSITIONS, ensure_transition_allowed

__all__ = [
    "matches",
    "filter_jobs",
    "parse_minutes",
    "ScheduleEvaluator",
    "MatchingService",
    "ApplicationService",
    "JobService",
    "ALLOWED_TRANSITIONS",
    "ensure_transition_allowed",
]
