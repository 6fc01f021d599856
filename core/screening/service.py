"""
Screening Service - the single entry point used by the HTTP layer.

Wires the engine and the read-side services around one ResultStore and an
optional cache.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from core.cache.screening_cache import ScreeningCacheService
from core.screening.analytics import AnalyticsAggregator, ScreeningAnalytics
from core.screening.engine import ScreeningEngine
from core.screening.export import ExportService
from core.screening.models import (
    RankedView,
    ResultFilter,
    ResultSort,
    Resume,
    ScreeningJobDTO,
    ShortlistAction,
)
from core.screening.ranking import DEFAULT_PAGE_SIZE, RankingService
from core.screening.shortlist import ShortlistManager
from core.screening.store import ResultStore

logger = logging.getLogger(__name__)


class ScreeningService:
    def __init__(
        self,
        store: ResultStore,
        engine: ScreeningEngine,
        cache: Optional[ScreeningCacheService] = None,
    ):
        self.store = store
        self.engine = engine
        self.cache = cache
        self.ranking = RankingService(store, cache)
        self.shortlist = ShortlistManager(store, cache)
        self.exporter = ExportService(store)
        self.analytics = AnalyticsAggregator(store)

    def submit_batch(self, job_post_id: str, employer_id: str, resumes: List[Resume]) -> ScreeningJobDTO:
        return self.engine.submit_batch(job_post_id, employer_id, resumes)

    def get_status(self, screening_job_id: str) -> ScreeningJobDTO:
        return self.engine.get_status(screening_job_id)

    def get_results(
        self,
        screening_job_id: str,
        result_filter: Optional[ResultFilter] = None,
        sort: Optional[ResultSort] = None,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> RankedView:
        return self.ranking.get_window(screening_job_id, result_filter, sort, offset, limit)

    def get_analytics(self, screening_job_id: str) -> ScreeningAnalytics:
        return self.analytics.get_analytics(screening_job_id)

    def update_shortlist(
        self,
        screening_job_id: str,
        candidate_result_ids: Iterable[str],
        action: ShortlistAction = ShortlistAction.ADD,
    ) -> int:
        return self.shortlist.update_shortlist(screening_job_id, candidate_result_ids, action)

    def export(
        self,
        screening_job_id: str,
        fmt: str = "csv",
        ids: Optional[Iterable[str]] = None,
    ) -> Tuple[bytes, str, str]:
        """Returns (payload, content_type, filename)."""
        payload = self.exporter.export(screening_job_id, fmt, ids)
        fmt = fmt.lower()
        return payload, self.exporter.content_type(fmt), self.exporter.filename(screening_job_id, fmt)

    def delete_job(self, screening_job_id: str) -> bool:
        """
        Delete a job and all of its results.

        In-flight scoring for the job is cancelled first; writes that race
        with the delete are dropped by the store. Unknown ids return False.
        """
        self.engine.cancel(screening_job_id)
        deleted = self.store.delete_job(screening_job_id)

        if self.cache is not None:
            self.cache.drop_job(screening_job_id)
        self.shortlist.forget(screening_job_id)

        if deleted:
            logger.info(f"Deleted screening job {screening_job_id}")
        else:
            logger.info(f"Delete requested for unknown screening job {screening_job_id}")
        return deleted

    def list_jobs(self, employer_id: str, limit: int = 20, offset: int = 0) -> Tuple[List[ScreeningJobDTO], int]:
        return self.store.list_jobs(employer_id, limit=limit, offset=offset)

    def shutdown(self) -> None:
        self.engine.shutdown(wait=False)
