#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import List

from core.screening.models import ShortlistAction


class ShortlistRequest(BaseModel):
    """Request to add or remove candidates from a job's shortlist."""
    candidate_ids: List[str] = Field(
        default_factory=list,
        description="Screening result ids to update"
    )
    action: ShortlistAction = Field(
        default=ShortlistAction.ADD,
        description="add or remove"
    )
