"""
Analytics Aggregator - match distribution and summary statistics.

Always computed from the job's full result set, never from the cache.
"""
import logging
from dataclasses import dataclass, asdict, field
from typing import Dict

from core.screening.errors import JobNotFoundError
from core.screening.models import MatchCategory, categorize_match
from core.screening.store import ResultStore

logger = logging.getLogger(__name__)


@dataclass
class ScreeningAnalytics:
    total_screened: int = 0
    average_match: float = 0.0
    max_match: float = 0.0
    min_match: float = 0.0
    strong_matches: int = 0
    moderate_matches: int = 0
    weak_matches: int = 0
    shortlisted_count: int = 0
    distribution: Dict[str, int] = field(default_factory=lambda: {"strong": 0, "moderate": 0, "weak": 0})

    def to_dict(self) -> Dict:
        return asdict(self)


def _percent(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


class AnalyticsAggregator:
    def __init__(self, store: ResultStore):
        self.store = store

    def get_analytics(self, screening_job_id: str) -> ScreeningAnalytics:
        if self.store.get_job(screening_job_id) is None:
            raise JobNotFoundError(screening_job_id)

        results = self.store.list_results(screening_job_id)
        if not results:
            return ScreeningAnalytics()

        counts = {MatchCategory.STRONG: 0, MatchCategory.MODERATE: 0, MatchCategory.WEAK: 0}
        for result in results:
            counts[categorize_match(result.match_percentage)] += 1

        scores = [r.match_percentage for r in results]
        total = len(results)

        return ScreeningAnalytics(
            total_screened=total,
            average_match=round(sum(scores) / total, 2),
            max_match=max(scores),
            min_match=min(scores),
            strong_matches=counts[MatchCategory.STRONG],
            moderate_matches=counts[MatchCategory.MODERATE],
            weak_matches=counts[MatchCategory.WEAK],
            shortlisted_count=sum(1 for r in results if r.is_shortlisted),
            distribution={
                "strong": _percent(counts[MatchCategory.STRONG], total),
                "moderate": _percent(counts[MatchCategory.MODERATE], total),
                "weak": _percent(counts[MatchCategory.WEAK], total),
            },
        )
