#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class ScreeningJobResponse(BaseModel):
    """Status and progress of a screening job."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "employer_id": "employer-1",
                "job_post_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "status": "processing",
                "total_resumes": 120,
                "processed_count": 45,
                "failed_count": 2,
                "progress": 37.5,
                "shortlisted_candidate_ids": [],
                "created_at": "2026-02-01T12:00:00+00:00",
                "updated_at": "2026-02-01T12:01:00+00:00"
            }
        }
    )

    id: str
    employer_id: str
    job_post_id: str
    status: str
    total_resumes: int = Field(ge=0)
    processed_count: int = Field(ge=0)
    failed_count: int = Field(ge=0)
    progress: float = Field(ge=0, le=100)
    shortlisted_candidate_ids: List[str] = Field(default_factory=list)
    created_at: Optional[str]
    updated_at: Optional[str]


class BatchUploadResponse(BaseModel):
    """Acknowledgement of a submitted batch."""
    success: bool
    message: str
    data: ScreeningJobResponse


class ScreeningResultItem(BaseModel):
    """One ranked screening result."""
    rank: int = Field(ge=1)
    id: str
    candidate_id: str
    candidate_name: str
    resume_filename: Optional[str]
    match_percentage: float = Field(ge=0, le=100)
    category: str
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    is_shortlisted: bool = False
    created_at: Optional[str]


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ScreeningResultsResponse(BaseModel):
    success: bool
    results: List[ScreeningResultItem]
    pagination: Pagination


class ScreeningAnalyticsResponse(BaseModel):
    """Match distribution and summary statistics for one job."""
    success: bool
    total_screened: int
    average_match: float
    max_match: float
    min_match: float
    strong_matches: int
    moderate_matches: int
    weak_matches: int
    shortlisted_count: int
    distribution: Dict[str, int]


class ShortlistResponse(BaseModel):
    success: bool
    action: str
    affected: int


class DeleteResponse(BaseModel):
    success: bool
    deleted: bool


class ScreeningJobListResponse(BaseModel):
    success: bool
    jobs: List[ScreeningJobResponse]
    pagination: Pagination
