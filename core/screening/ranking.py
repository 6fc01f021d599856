"""
Ranking Service - ordered, filtered, paginated views of a job's results.

Rank order is match percentage descending, then created_at ascending, then id
ascending, so two identical queries always produce the same ordering. Every
returned item carries its 1-based position in that full rank order.
"""
import logging
from typing import Dict, List, Optional, Tuple

from core.cache.screening_cache import ScreeningCacheService, make_results_key
from core.screening.errors import JobNotFoundError, ValidationError
from core.screening.models import (
    MatchCategory,
    RankedItem,
    RankedView,
    ResultFilter,
    ResultSort,
    ScreeningResultDTO,
    SortField,
    categorize_match,
)
from core.screening.store import ResultStore

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def base_order(results: List[ScreeningResultDTO]) -> List[ScreeningResultDTO]:
    """Deterministic insertion order: created_at ascending, then id."""
    return sorted(results, key=lambda r: (r.created_at, r.id))


def rank_order(results: List[ScreeningResultDTO]) -> List[ScreeningResultDTO]:
    """Best match first; ties fall back to the base order."""
    return sorted(base_order(results), key=lambda r: r.match_percentage, reverse=True)


def apply_filter(results: List[ScreeningResultDTO], result_filter: ResultFilter) -> List[ScreeningResultDTO]:
    if (
        result_filter.min_match is not None
        and result_filter.max_match is not None
        and result_filter.min_match > result_filter.max_match
    ):
        return []

    category = MatchCategory(result_filter.category)
    filtered = []
    for result in results:
        if result_filter.min_match is not None and result.match_percentage < result_filter.min_match:
            continue
        if result_filter.max_match is not None and result.match_percentage > result_filter.max_match:
            continue
        if category != MatchCategory.ALL and categorize_match(result.match_percentage) != category:
            continue
        if result_filter.shortlisted_only and not result.is_shortlisted:
            continue
        filtered.append(result)
    return filtered


def apply_sort(results: List[ScreeningResultDTO], sort: ResultSort) -> List[ScreeningResultDTO]:
    """
    Sort a result list. Python's sort is stable, also with reverse=True, so
    ties keep the deterministic base order.
    """
    ordered = base_order(results)
    sort_by = SortField(sort.sort_by)

    if sort_by == SortField.RANK:
        ranked = rank_order(ordered)
        return list(reversed(ranked)) if sort.descending else ranked
    if sort_by == SortField.MATCH:
        return sorted(ordered, key=lambda r: r.match_percentage, reverse=sort.descending)
    return sorted(ordered, key=lambda r: (r.candidate_name or "").casefold(), reverse=sort.descending)


def validate_window(offset: int, limit: int) -> None:
    if limit is None or limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}", code="INVALID_PAGINATION")
    if offset is None or offset < 0:
        raise ValidationError("offset must be >= 0", code="INVALID_PAGINATION")


def validate_filter(result_filter: ResultFilter) -> None:
    for name in ("min_match", "max_match"):
        value = getattr(result_filter, name)
        if value is not None and (value < 0 or value > 100):
            raise ValidationError(f"{name} must be between 0 and 100", code="INVALID_FILTER")


class RankingService:
    """Computes ranked views, reading through the screening cache when one is given."""

    def __init__(self, store: ResultStore, cache: Optional[ScreeningCacheService] = None):
        self.store = store
        self.cache = cache

    def get_results(
        self,
        screening_job_id: str,
        result_filter: Optional[ResultFilter] = None,
        sort: Optional[ResultSort] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[List[RankedItem], int]:
        """
        Get one page of a job's results.

        Args:
            screening_job_id: The screening job.
            result_filter: Match range, category and shortlist filters.
            sort: Sort field and direction. Defaults to rank, best first.
            page: 1-indexed page number.
            page_size: Items per page (1-100).

        Returns:
            (items, total) where total counts every result matching the filter.
        """
        if page is None or page < 1:
            raise ValidationError("page must be >= 1", code="INVALID_PAGINATION")
        validate_window(0, page_size)
        view = self.get_window(screening_job_id, result_filter, sort, offset=(page - 1) * page_size, limit=page_size)
        return view.items, view.total

    def get_window(
        self,
        screening_job_id: str,
        result_filter: Optional[ResultFilter] = None,
        sort: Optional[ResultSort] = None,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> RankedView:
        """Offset/limit variant of get_results returning the full view."""
        result_filter = result_filter or ResultFilter()
        sort = sort or ResultSort()
        validate_window(offset, limit)
        validate_filter(result_filter)

        if self.store.get_job(screening_job_id) is None:
            raise JobNotFoundError(screening_job_id)

        key = None
        if self.cache is not None:
            key = make_results_key(
                screening_job_id,
                (result_filter.normalized(), sort.normalized(), offset, limit),
                self.cache.generation(screening_job_id),
            )
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        view = self.compute(screening_job_id, result_filter, sort, offset, limit)

        if self.cache is not None:
            self.cache.put(key, view)
        return view

    def compute(
        self,
        screening_job_id: str,
        result_filter: ResultFilter,
        sort: ResultSort,
        offset: int,
        limit: int,
    ) -> RankedView:
        """Build a view straight from the store, bypassing the cache."""
        results = self.store.list_results(screening_job_id)
        ranks: Dict[str, int] = {r.id: i + 1 for i, r in enumerate(rank_order(results))}

        matching = apply_sort(apply_filter(results, result_filter), sort)
        window = matching[offset:offset + limit]

        logger.debug(
            f"Ranked {len(results)} results for {screening_job_id}: "
            f"{len(matching)} match filter, returning {len(window)}"
        )

        return RankedView(
            items=[RankedItem(rank=ranks[r.id], result=r) for r in window],
            total=len(matching),
            offset=offset,
            limit=limit,
        )
