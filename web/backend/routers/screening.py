#!/usr/bin/env python3
"""
Screening endpoints - bulk resume upload, results, shortlist and export.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.screening.errors import InvalidBatchError
from core.screening.models import (
    MatchCategory,
    ResultFilter,
    ResultSort,
    Resume,
    SortField,
)
from core.screening.ranking import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from core.screening.service import ScreeningService
from ..config import get_config
from ..dependencies import get_screening_service
from ..models.requests import ShortlistRequest
from ..models.responses import (
    BatchUploadResponse,
    DeleteResponse,
    Pagination,
    ScreeningAnalyticsResponse,
    ScreeningJobListResponse,
    ScreeningJobResponse,
    ScreeningResultsResponse,
    ShortlistResponse,
)
from ..services import (
    to_analytics_response,
    to_job_response,
    to_results_response,
)
from ..utils import content_disposition, parse_id_list

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/screening", tags=["screening"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)}
    )


def _upload_rate_limit() -> str:
    return get_config().web.upload_rate_limit


@router.post("/batch-upload", response_model=BatchUploadResponse, status_code=202)
@limiter.limit(_upload_rate_limit)
async def batch_upload(
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    job_id: Optional[str] = Form(None),
    employer_id: Optional[str] = Form(None),
    service: ScreeningService = Depends(get_screening_service)
):
    """
    Upload a batch of resumes for screening against one job posting.

    Returns 202 as soon as the batch is queued; poll GET /api/screening/{id}
    for progress. Files are held in memory, never written to disk.
    """
    screening_config = get_config().screening

    if not job_id:
        raise InvalidBatchError("Job ID is required", code="MISSING_JOB_REFERENCE")
    if not employer_id:
        raise InvalidBatchError("Employer ID is required", code="MISSING_EMPLOYER")
    if not files:
        raise InvalidBatchError("At least 1 resume required", code="EMPTY_BATCH")
    if len(files) > screening_config.max_batch_size:
        raise InvalidBatchError(
            f"Maximum {screening_config.max_batch_size} resumes per batch",
            code="BATCH_TOO_LARGE"
        )

    resumes = []
    for upload in files:
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in screening_config.allowed_content_types:
            raise InvalidBatchError(
                f"Unsupported file type for {upload.filename}: only PDF files are allowed",
                code="INVALID_FILE_TYPE"
            )

        content = await upload.read()
        if len(content) > screening_config.max_file_size_bytes:
            limit_mb = screening_config.max_file_size_bytes // (1024 * 1024)
            raise InvalidBatchError(
                f"File {upload.filename} exceeds {limit_mb}MB limit",
                code="FILE_TOO_LARGE"
            )

        resumes.append(Resume(
            filename=upload.filename or "resume.pdf",
            content=content,
            content_type=content_type,
        ))

    job = service.submit_batch(job_id, employer_id, resumes)

    return BatchUploadResponse(
        success=True,
        message=f"Screening started for {len(resumes)} resumes",
        data=to_job_response(job)
    )


@router.get("", response_model=ScreeningJobListResponse)
def list_screening_jobs(
    employer_id: str = Query(..., min_length=1, description="Employer whose jobs to list"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    service: ScreeningService = Depends(get_screening_service)
):
    """List an employer's screening jobs, newest first."""
    jobs, total = service.list_jobs(employer_id, limit=limit, offset=offset)
    return ScreeningJobListResponse(
        success=True,
        jobs=[to_job_response(job) for job in jobs],
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total
        )
    )


@router.get("/{screening_job_id}", response_model=ScreeningJobResponse)
def get_screening_status(
    screening_job_id: str,
    service: ScreeningService = Depends(get_screening_service)
):
    """Get the status and progress counters of a screening job."""
    return to_job_response(service.get_status(screening_job_id))


@router.get("/{screening_job_id}/results", response_model=ScreeningResultsResponse)
def get_screening_results(
    screening_job_id: str,
    min_match: Optional[float] = Query(default=None, ge=0, le=100, description="Minimum match percentage"),
    max_match: Optional[float] = Query(default=None, ge=0, le=100, description="Maximum match percentage"),
    category: MatchCategory = Query(default=MatchCategory.ALL, description="all, strong, moderate or weak"),
    status: str = Query(default="all", pattern="^(all|shortlisted)$", description="all or shortlisted"),
    sort_by: SortField = Query(default=SortField.RANK, description="rank, match or name"),
    sort_desc: bool = Query(default=False, description="Reverse the sort direction"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    service: ScreeningService = Depends(get_screening_service)
):
    """
    Get a filtered, sorted page of a job's results.

    Default order is rank: best match first, earlier submissions first on ties.
    Every item carries its rank in the job's full result set.
    """
    view = service.get_results(
        screening_job_id,
        ResultFilter(
            min_match=min_match,
            max_match=max_match,
            category=category,
            shortlisted_only=(status == "shortlisted"),
        ),
        ResultSort(sort_by=sort_by, descending=sort_desc),
        offset=offset,
        limit=limit,
    )
    return to_results_response(view)


@router.get("/{screening_job_id}/analytics", response_model=ScreeningAnalyticsResponse)
def get_screening_analytics(
    screening_job_id: str,
    service: ScreeningService = Depends(get_screening_service)
):
    """Match distribution and summary statistics over all of a job's results."""
    return to_analytics_response(service.get_analytics(screening_job_id))


@router.post("/{screening_job_id}/shortlist", response_model=ShortlistResponse)
def update_shortlist(
    screening_job_id: str,
    body: ShortlistRequest,
    service: ScreeningService = Depends(get_screening_service)
):
    """Add or remove candidates from the shortlist. Ids from other jobs are ignored."""
    affected = service.update_shortlist(screening_job_id, body.candidate_ids, body.action)
    return ShortlistResponse(success=True, action=body.action.value, affected=affected)


@router.get("/{screening_job_id}/export")
def export_results(
    screening_job_id: str,
    format: str = Query(default="csv", pattern="^(csv|json)$", description="csv or json"),
    ids: Optional[str] = Query(default=None, description="Comma-separated result or candidate ids"),
    service: ScreeningService = Depends(get_screening_service)
):
    """Download a job's results as a CSV attachment or a JSON array."""
    payload, media_type, filename = service.export(screening_job_id, format, parse_id_list(ids))
    return Response(
        content=payload,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename)}
    )


@router.delete("/{screening_job_id}", response_model=DeleteResponse)
def delete_screening_job(
    screening_job_id: str,
    service: ScreeningService = Depends(get_screening_service)
):
    """Delete a job and all of its results. Unknown ids report deleted=false."""
    return DeleteResponse(success=True, deleted=service.delete_job(screening_job_id))
