"""
Shortlist Manager - bulk add/remove of results on a job's shortlist.

The shortlist flag is the only in-place mutation allowed on a result. Updates
for the same job are serialized with a per-job lock; the store applies each
update in a single transaction.
"""
import logging
import threading
from typing import Dict, Iterable, List, Optional

from core.cache.screening_cache import ScreeningCacheService
from core.screening.errors import JobNotFoundError, ValidationError
from core.screening.models import ShortlistAction
from core.screening.store import ResultStore

logger = logging.getLogger(__name__)


class ShortlistManager:
    """Applies shortlist changes scoped to a single screening job."""

    def __init__(self, store: ResultStore, cache: Optional[ScreeningCacheService] = None):
        self.store = store
        self.cache = cache
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _job_lock(self, screening_job_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(screening_job_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[screening_job_id] = lock
            return lock

    def forget(self, screening_job_id: str) -> None:
        """Drop the job's lock after the job is deleted."""
        with self._locks_guard:
            self._locks.pop(screening_job_id, None)

    def update_shortlist(
        self,
        screening_job_id: str,
        candidate_result_ids: Iterable[str],
        action: ShortlistAction = ShortlistAction.ADD,
    ) -> int:
        """
        Add or remove results from the shortlist.

        Args:
            screening_job_id: The screening job.
            candidate_result_ids: Result ids to update. Ids from other jobs
                are ignored rather than rejected.
            action: ShortlistAction.ADD or ShortlistAction.REMOVE.

        Returns:
            Number of given ids that belong to this job.

        Raises:
            ValidationError: Empty id list or unknown action.
            JobNotFoundError: The screening job does not exist.
        """
        ids: List[str] = []
        for result_id in candidate_result_ids or []:
            result_id = str(result_id).strip()
            if result_id and result_id not in ids:
                ids.append(result_id)
        if not ids:
            raise ValidationError("At least one candidate id is required", code="EMPTY_SHORTLIST")

        try:
            action = ShortlistAction(action)
        except ValueError:
            raise ValidationError(f"Unknown shortlist action: {action}", code="INVALID_ACTION")

        if self.store.get_job(screening_job_id) is None:
            raise JobNotFoundError(screening_job_id)

        with self._job_lock(screening_job_id):
            affected = self.store.set_shortlisted(
                screening_job_id, ids, shortlisted=(action == ShortlistAction.ADD)
            )

        if self.cache is not None:
            self.cache.invalidate(screening_job_id)

        logger.info(
            f"Shortlist {action.value} for screening job {screening_job_id}: "
            f"{affected} of {len(ids)} ids matched"
        )
        return affected
