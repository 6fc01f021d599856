"""
Tests for screening data objects: match categories and oracle validation.
"""
import math

import pytest

from core.screening.models import (
    MatchCategory,
    OracleAnalysis,
    RankedView,
    ResultFilter,
    ResultSort,
    Resume,
    ScreeningJobDTO,
    SortField,
    categorize_match,
)


class TestCategorizeMatch:

    @pytest.mark.parametrize("score,expected", [
        (100, MatchCategory.STRONG),
        (70, MatchCategory.STRONG),
        (69.99, MatchCategory.MODERATE),
        (50, MatchCategory.MODERATE),
        (49, MatchCategory.WEAK),
        (49.99, MatchCategory.WEAK),
        (0, MatchCategory.WEAK),
    ])
    def test_boundaries(self, score, expected):
        assert categorize_match(score) == expected


class TestOracleAnalysisValidation:

    def test_accepts_range_limits(self):
        assert OracleAnalysis(match_percentage=0).validate().match_percentage == 0
        assert OracleAnalysis(match_percentage=100).validate().match_percentage == 100

    def test_rounds_to_two_decimals(self):
        assert OracleAnalysis(match_percentage=72.3456).validate().match_percentage == 72.35

    def test_numeric_string_is_coerced(self):
        assert OracleAnalysis(match_percentage="81").validate().match_percentage == 81.0

    @pytest.mark.parametrize("bad", [-0.01, 100.5, math.nan, "high", None])
    def test_rejects_out_of_range_and_non_numeric(self, bad):
        with pytest.raises(ValueError):
            OracleAnalysis(match_percentage=bad).validate()

    def test_validate_does_not_mutate(self):
        analysis = OracleAnalysis(match_percentage=55.555)
        analysis.validate()
        assert analysis.match_percentage == 55.555


class TestResume:

    def test_display_name_from_filename(self):
        assert Resume(filename="jane_doe-cv.pdf", content=b"").display_name() == "jane doe cv"

    def test_display_name_prefers_candidate_name(self):
        resume = Resume(filename="x.pdf", content=b"", candidate_name="Jane Doe")
        assert resume.display_name() == "Jane Doe"

    def test_candidate_id_generated_when_missing(self):
        resume = Resume(filename="x.pdf", content=b"")
        assert resume.resolved_candidate_id()
        assert Resume(filename="x.pdf", content=b"", candidate_id="c-1").resolved_candidate_id() == "c-1"


class TestQueryObjects:

    def test_filter_normalization_is_canonical(self):
        a = ResultFilter(min_match=50, category="strong")
        b = ResultFilter(min_match=50.0, category=MatchCategory.STRONG)
        assert a.normalized() == b.normalized()

    def test_distinct_filters_normalize_differently(self):
        assert ResultFilter(min_match=50).normalized() != ResultFilter(max_match=50).normalized()

    def test_sort_normalization(self):
        assert ResultSort(sort_by="match", descending=True).normalized() == ("match", True)
        assert ResultSort().normalized() == (SortField.RANK.value, False)

    def test_ranked_view_has_more(self):
        assert RankedView(items=[], total=25, offset=0, limit=20).has_more is True
        assert RankedView(items=[], total=25, offset=20, limit=20).has_more is False

    def test_job_progress(self):
        job = ScreeningJobDTO(id="j", employer_id="e", job_post_id="p", status="processing",
                              total_resumes=8, processed_count=3)
        assert job.progress == 37.5
