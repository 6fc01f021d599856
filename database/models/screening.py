import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, Text, DateTime, Boolean, Float, ForeignKey, JSON, String,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from .base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ScreeningJob(Base):
    """
    One bulk screening request: a batch of resumes against one job post.

    processed_count counts every attempted resume (scored or skipped) and is
    only ever changed by a single UPDATE ... SET processed_count = processed_count + 1.
    """
    __tablename__ = 'screening_job'

    id = Column(String(36), primary_key=True, default=new_id)
    employer_id = Column(Text, nullable=False)
    job_post_id = Column(Text, nullable=False)

    status = Column(Text, nullable=False, default='pending')  # pending|processing|completed|failed
    total_resumes = Column(Integer, nullable=False, default=0)
    processed_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)

    # Kept in sync with ScreeningResult.is_shortlisted by the shortlist update
    shortlisted_candidate_ids = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    results = relationship(
        "ScreeningResult",
        back_populates="screening_job",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint('total_resumes >= 0', name='ck_screening_job_total_resumes'),
        CheckConstraint('processed_count <= total_resumes', name='ck_screening_job_processed_count'),
        Index('idx_screening_job_employer', 'employer_id', 'created_at'),
    )


class ScreeningResult(Base):
    """Score and feedback for one resume. match_percentage is never updated after insert."""
    __tablename__ = 'screening_result'

    id = Column(String(36), primary_key=True, default=new_id)
    screening_job_id = Column(
        String(36), ForeignKey('screening_job.id', ondelete='CASCADE'), nullable=False
    )

    candidate_id = Column(Text, nullable=False)
    candidate_name = Column(Text, nullable=False, default='')
    resume_filename = Column(Text)

    match_percentage = Column(Float, nullable=False)
    matched_skills = Column(JSON, nullable=False, default=list)
    missing_skills = Column(JSON, nullable=False, default=list)
    strengths = Column(JSON, nullable=False, default=list)
    improvement_areas = Column(JSON, nullable=False, default=list)
    recommendations = Column(JSON, nullable=False, default=list)

    is_shortlisted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    screening_job = relationship("ScreeningJob", back_populates="results")

    __table_args__ = (
        CheckConstraint(
            'match_percentage >= 0 AND match_percentage <= 100',
            name='ck_screening_result_match_percentage',
        ),
        Index('idx_screening_result_job', 'screening_job_id', 'created_at'),
    )
