"""
Calendar board: jobs grouped by day with manual ordering inside each day.

Manual positions are kept in a PositionMap keyed by (day, job id) and live only
as long as the board instance (they are not written to the backend). Moving a
job to another day changes its date through the persistence collaborator first;
local positions and the job list are only replaced after that call succeeded.
"""
import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from invoicedesk.schemas.job import JobEntry, JobStatus, parse_day
from invoicedesk.services.ordering_service import PositionMap, reorder_by_rank, sort_by_rank

logger = logging.getLogger(__name__)

DayInput = Union[dt.date, dt.datetime, str]


class JobPersistence(Protocol):
    def update_job_entry(self, job_id: str, job: Dict[str, Any]) -> Any:
        ...


def day_key(day: DayInput) -> dt.date:
    """Calendar day used as the group key (date, datetime or ISO string)."""
    value = parse_day(day)
    if isinstance(value, str):
        return dt.date.fromisoformat(value)
    return value


class CalendarBoard:
    """Jobs of the calendar view plus their per-day manual order"""

    def __init__(
        self,
        jobs: Iterable[JobEntry],
        persistence: JobPersistence,
        positions: Optional[PositionMap] = None,
    ):
        self.jobs: List[JobEntry] = list(jobs)
        self.persistence = persistence
        self.positions = positions if positions is not None else PositionMap()

    @classmethod
    def from_api(cls, client) -> "CalendarBoard":
        """Board with all job entries loaded through ``client`` (an ApiClient)."""
        return cls(client.get_job_entries(), client)

    def set_jobs(self, jobs: Iterable[JobEntry]) -> None:
        """Replace the job list (e.g. after a reload); manual positions are kept."""
        self.jobs = list(jobs)

    def find_job(self, job_id: str) -> Optional[JobEntry]:
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None

    def _require_job(self, job_id: str) -> JobEntry:
        job = self.find_job(job_id)
        if job is None:
            raise ValueError(f"Job {job_id} is not on this board")
        return job

    @staticmethod
    def is_locked(job: JobEntry) -> bool:
        """Invoiced jobs stay on their day and keep their position."""
        return job.status == JobStatus.INVOICED

    def jobs_for_day(self, day: DayInput) -> List[JobEntry]:
        """Jobs of one day by manual position, then creation time."""
        key = day_key(day)
        return sort_by_rank([job for job in self.jobs if job.date == key], key, self.positions)

    def reorder_within_day(self, day: DayInput, dragged_id: str, target_id: str) -> bool:
        """
        Drop a job onto another job of the same day. Returns True if the order changed.
        Invoiced jobs cannot be dragged.
        """
        if self.is_locked(self._require_job(dragged_id)):
            logger.debug(f"Job {dragged_id} is invoiced; not reordering")
            return False
        key = day_key(day)
        new_positions = reorder_by_rank(self.jobs_for_day(key), key, self.positions, dragged_id, target_id)
        if new_positions is self.positions:
            return False
        self.positions = new_positions
        return True

    def move_job_to_day(self, job_id: str, target_day: DayInput) -> JobEntry:
        """
        Move a job to another day, appended after the jobs already there.

        Raises ValueError for an invoiced job. Raises whatever the persistence
        call raises; in that case neither the job list nor the positions are
        touched.
        """
        job = self._require_job(job_id)
        if self.is_locked(job):
            raise ValueError(f"Job {job_id} is invoiced and cannot be moved")
        old_key = job.date
        new_key = day_key(target_day)
        if old_key == new_key:
            logger.debug(f"Job {job_id} dropped on its own day {new_key}; nothing to do")
            return job

        append_rank = len(self.jobs_for_day(new_key))
        moved = job.model_copy(update={"date": new_key})

        try:
            saved = self.persistence.update_job_entry(job.id, moved.to_api_dict())
        except Exception as e:
            logger.error(f"Error updating job date for {job.id} ({job.title!r}): {e}")
            raise

        if isinstance(saved, JobEntry) and saved.date == new_key:
            moved = saved

        self.positions = self.positions.without(old_key, job.id).with_rank(new_key, job.id, append_rank)
        self.jobs = [moved if j.id == job.id else j for j in self.jobs]
        logger.info(f"Job moved via drag and drop: {job.title!r} ({job.id}) {old_key} -> {new_key}")
        return moved

    def handle_drop(self, job_id: str, target_day: DayInput, target_job_id: Optional[str] = None) -> bool:
        """
        Drop handler for the calendar.

        - invoiced job: no-op
        - same day, onto another job: reorder within the day
        - same day, not onto a job: no-op
        - other day, onto the day cell: move and append
        - other day, onto one of its jobs: no-op (job drops only reorder)
        Returns True if anything changed.
        """
        job = self._require_job(job_id)
        if self.is_locked(job):
            logger.debug(f"Job {job_id} is invoiced; drop ignored")
            return False
        key = day_key(target_day)
        if job.date == key:
            if target_job_id is None:
                return False
            return self.reorder_within_day(key, job_id, target_job_id)
        if target_job_id is not None:
            logger.debug(f"Job {job_id} dropped onto job {target_job_id} of another day; nothing to do")
            return False
        self.move_job_to_day(job_id, key)
        return True
