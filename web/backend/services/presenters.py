#!/usr/bin/env python3
"""
Screening presenters - turn core screening objects into API response models.
"""

from core.screening.analytics import ScreeningAnalytics
from core.screening.models import RankedItem, RankedView, ScreeningJobDTO
from ..models.responses import (
    Pagination,
    ScreeningAnalyticsResponse,
    ScreeningJobResponse,
    ScreeningResultItem,
    ScreeningResultsResponse,
)
from ..utils import safe_datetime_iso


def to_job_response(job: ScreeningJobDTO) -> ScreeningJobResponse:
    return ScreeningJobResponse(
        id=job.id,
        employer_id=job.employer_id,
        job_post_id=job.job_post_id,
        status=job.status,
        total_resumes=job.total_resumes,
        processed_count=job.processed_count,
        failed_count=job.failed_count,
        progress=job.progress,
        shortlisted_candidate_ids=list(job.shortlisted_candidate_ids),
        created_at=safe_datetime_iso(job.created_at),
        updated_at=safe_datetime_iso(job.updated_at),
    )


def to_result_item(item: RankedItem) -> ScreeningResultItem:
    result = item.result
    return ScreeningResultItem(
        rank=item.rank,
        id=result.id,
        candidate_id=result.candidate_id,
        candidate_name=result.candidate_name,
        resume_filename=result.resume_filename,
        match_percentage=result.match_percentage,
        category=item.category.value,
        matched_skills=result.matched_skills,
        missing_skills=result.missing_skills,
        strengths=result.strengths,
        improvement_areas=result.improvement_areas,
        recommendations=result.recommendations,
        is_shortlisted=result.is_shortlisted,
        created_at=safe_datetime_iso(result.created_at),
    )


def to_results_response(view: RankedView) -> ScreeningResultsResponse:
    return ScreeningResultsResponse(
        success=True,
        results=[to_result_item(item) for item in view.items],
        pagination=Pagination(
            total=view.total,
            limit=view.limit,
            offset=view.offset,
            has_more=view.has_more,
        ),
    )


def to_analytics_response(analytics: ScreeningAnalytics) -> ScreeningAnalyticsResponse:
    return ScreeningAnalyticsResponse(success=True, **analytics.to_dict())
