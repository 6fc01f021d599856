"""
SQLAlchemy implementations of the screening storage interfaces.

Every call runs in its own unit of work. SQLAlchemy errors are logged with
the job context and re-raised as PersistenceError so nothing above this
module depends on the ORM.
"""
import logging
from datetime import timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.screening.errors import PersistenceError
from core.screening.models import (
    JobRequirements,
    OracleAnalysis,
    ScreeningJobDTO,
    ScreeningResultDTO,
)
from core.screening.store import JobCatalog, ResultStore
from database.models import JobPost, ScreeningJob, ScreeningResult
from database.uow import job_post_uow, screening_uow

logger = logging.getLogger(__name__)


def _aware(value):
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def job_to_dto(job: ScreeningJob) -> ScreeningJobDTO:
    return ScreeningJobDTO(
        id=str(job.id),
        employer_id=job.employer_id,
        job_post_id=job.job_post_id,
        status=job.status,
        total_resumes=job.total_resumes,
        processed_count=job.processed_count,
        failed_count=job.failed_count,
        shortlisted_candidate_ids=list(job.shortlisted_candidate_ids or []),
        created_at=_aware(job.created_at),
        updated_at=_aware(job.updated_at),
    )


def result_to_dto(result: ScreeningResult) -> ScreeningResultDTO:
    return ScreeningResultDTO(
        id=str(result.id),
        screening_job_id=str(result.screening_job_id),
        candidate_id=result.candidate_id,
        candidate_name=result.candidate_name or "",
        resume_filename=result.resume_filename,
        match_percentage=float(result.match_percentage),
        matched_skills=list(result.matched_skills or []),
        missing_skills=list(result.missing_skills or []),
        strengths=list(result.strengths or []),
        improvement_areas=list(result.improvement_areas or []),
        recommendations=list(result.recommendations or []),
        is_shortlisted=bool(result.is_shortlisted),
        created_at=_aware(result.created_at),
    )


def job_post_to_requirements(job_post: JobPost) -> JobRequirements:
    return JobRequirements(
        job_post_id=str(job_post.id),
        title=job_post.title or "",
        description=job_post.description or "",
        required_skills=list(job_post.required_skills or []),
        nice_to_have_skills=list(job_post.nice_to_have_skills or []),
        years_of_experience=job_post.years_of_experience,
    )


class SqlResultStore(ResultStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create_job(self, employer_id: str, job_post_id: str, total_resumes: int) -> ScreeningJobDTO:
        try:
            with screening_uow(self.session_factory) as repo:
                return job_to_dto(repo.create_job(employer_id, job_post_id, total_resumes))
        except SQLAlchemyError as e:
            logger.error(f"Failed to create screening job for job post {job_post_id}: {e}")
            raise PersistenceError("Failed to create screening job") from e

    def get_job(self, screening_job_id: str) -> Optional[ScreeningJobDTO]:
        try:
            with screening_uow(self.session_factory) as repo:
                job = repo.get_job(screening_job_id)
                return job_to_dto(job) if job is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to load screening job") from e

    def set_status(self, screening_job_id: str, status: str) -> bool:
        try:
            with screening_uow(self.session_factory) as repo:
                return repo.set_status(screening_job_id, status)
        except SQLAlchemyError as e:
            logger.error(f"Failed to set status {status} on screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to update screening job") from e

    def add_result(
        self,
        screening_job_id: str,
        candidate_id: str,
        candidate_name: str,
        resume_filename: Optional[str],
        analysis: OracleAnalysis,
    ) -> Optional[ScreeningResultDTO]:
        try:
            with screening_uow(self.session_factory) as repo:
                # The increment doubles as the existence check: 0 rows means the job was deleted
                if not repo.increment_processed(screening_job_id):
                    return None
                result = repo.insert_result(
                    screening_job_id,
                    candidate_id=candidate_id,
                    candidate_name=candidate_name,
                    resume_filename=resume_filename,
                    match_percentage=analysis.match_percentage,
                    matched_skills=list(analysis.matched_skills),
                    missing_skills=list(analysis.missing_skills),
                    strengths=list(analysis.strengths),
                    improvement_areas=list(analysis.gaps),
                    recommendations=list(analysis.recommendations),
                )
                return result_to_dto(result)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to store result for candidate {candidate_id} in screening job {screening_job_id}: {e}"
            )
            raise PersistenceError("Failed to store screening result") from e

    def record_failure(self, screening_job_id: str) -> bool:
        try:
            with screening_uow(self.session_factory) as repo:
                return repo.increment_processed(screening_job_id, failed=True)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record skipped resume for screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to update screening job") from e

    def list_results(self, screening_job_id: str) -> List[ScreeningResultDTO]:
        try:
            with screening_uow(self.session_factory) as repo:
                return [result_to_dto(r) for r in repo.list_results(screening_job_id)]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list results for screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to load screening results") from e

    def set_shortlisted(self, screening_job_id: str, result_ids: Iterable[str], shortlisted: bool) -> int:
        try:
            with screening_uow(self.session_factory) as repo:
                return repo.set_shortlisted(screening_job_id, result_ids, shortlisted)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update shortlist for screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to update shortlist") from e

    def delete_job(self, screening_job_id: str) -> bool:
        try:
            with screening_uow(self.session_factory) as repo:
                return repo.delete_job(screening_job_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete screening job {screening_job_id}: {e}")
            raise PersistenceError("Failed to delete screening job") from e

    def list_jobs(self, employer_id: str, limit: int, offset: int) -> Tuple[List[ScreeningJobDTO], int]:
        try:
            with screening_uow(self.session_factory) as repo:
                jobs, total = repo.list_jobs(employer_id, limit, offset)
                return [job_to_dto(j) for j in jobs], total
        except SQLAlchemyError as e:
            logger.error(f"Failed to list screening jobs for employer {employer_id}: {e}")
            raise PersistenceError("Failed to list screening jobs") from e


class SqlJobCatalog(JobCatalog):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_requirements(self, job_post_id: str) -> Optional[JobRequirements]:
        try:
            with job_post_uow(self.session_factory) as repo:
                job_post = repo.get_by_id(job_post_id)
                return job_post_to_requirements(job_post) if job_post is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load job post {job_post_id}: {e}")
            raise PersistenceError("Failed to load job post") from e
