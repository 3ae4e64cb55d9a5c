"""
Sathi Seva: job matching and scheduling for a local-services marketplace.

Clients post jobs tagged with the skills they need; workers see a feed of
matching jobs, apply, and follow their schedule as jobs come due.
"""

__version__ = "0.1.0"

from sathi_seva.container import Marketplace, create_marketplace
from sathi_seva.jobs.application import ApplicationService
from sathi_seva.jobs.lifecycle import JobService
from sathi_seva.jobs.matcher import MatchingService
from sathi_seva.jobs.schedule import ScheduleEvaluator

__all__ = [
    "Marketplace",
    "create_marketplace",
    "ApplicationService",
    "JobService",
    "MatchingService",
    "ScheduleEvaluator",
]
