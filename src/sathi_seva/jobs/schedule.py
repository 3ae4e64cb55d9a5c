"""Schedule status for jobs a worker has applied to."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sathi_seva.core.clock import Clock, SystemClock
from sathi_seva.core.models import Job, ScheduleStatus
from sathi_seva.jobs.duration import parse_minutes
from sathi_seva.utils.logging import get_logger

logger = get_logger(__name__)

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def _parse_time(value: Optional[str]) -> Optional[time]:
    if value is None or not value.strip():
        return time(0, 0)
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    return None


class ScheduleEvaluator:
    """Decides whether a job's time window has elapsed."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()
        self.logger = logger.bind(component="schedule_evaluator")

    def compute_start(self, job: Job) -> Optional[datetime]:
        """Combine scheduled date and time (midnight when absent)."""
        if not job.scheduled_date:
            return None
        try:
            day = date.fromisoformat(job.scheduled_date.strip())
        except ValueError:
            self.logger.debug("Unparseable scheduled date", job_id=job.id, scheduled_date=job.scheduled_date)
            return None

        start_time = _parse_time(job.scheduled_time)
        if start_time is None:
            self.logger.debug("Unparseable scheduled time", job_id=job.id, scheduled_time=job.scheduled_time)
            return None

        return datetime.combine(day, start_time)

    def compute_end(self, job: Job) -> Optional[datetime]:
        start = self.compute_start(job)
        if start is None:
            return None
        return start + timedelta(minutes=parse_minutes(job.duration))

    def status(self, job: Job, now: Optional[datetime] = None) -> ScheduleStatus:
        """
        Pending until the job's end time, over from then on.

        A job without a parseable schedule stays pending. When ``now`` is
        timezone-aware the stored schedule is read in that timezone.
        """
        end = self.compute_end(job)
        if end is None:
            return ScheduleStatus.PENDING

        current = now or self.clock.now()
        if current.tzinfo is not None:
            end = end.replace(tzinfo=current.tzinfo)

        return ScheduleStatus.OVER if current >= end else ScheduleStatus.PENDING
