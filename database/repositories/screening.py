import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, delete, update

from database.models import ScreeningJob, ScreeningResult
from database.models.screening import utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ScreeningRepository(BaseRepository):
    """Data access for screening jobs and results. Callers own the transaction."""

    def create_job(self, employer_id: str, job_post_id: str, total_resumes: int) -> ScreeningJob:
        job = ScreeningJob(
            employer_id=employer_id,
            job_post_id=job_post_id,
            status='pending',
            total_resumes=total_resumes,
            processed_count=0,
            failed_count=0,
            shortlisted_candidate_ids=[],
        )
        return self.add(job)

    def get_job(self, screening_job_id: str) -> Optional[ScreeningJob]:
        stmt = select(ScreeningJob).where(ScreeningJob.id == screening_job_id)
        return self.fetch_one(stmt)

    def set_status(self, screening_job_id: str, status: str) -> bool:
        stmt = (
            update(ScreeningJob)
            .where(ScreeningJob.id == screening_job_id)
            .values(status=status, updated_at=utcnow())
        )
        return self.db.execute(stmt).rowcount > 0

    def increment_processed(self, screening_job_id: str, failed: bool = False) -> bool:
        """
        Count one attempted resume with a single atomic UPDATE.

        Returns False when the job row is gone (0 rows affected).
        """
        values = {
            'processed_count': ScreeningJob.processed_count + 1,
            'updated_at': utcnow(),
        }
        if failed:
            values['failed_count'] = ScreeningJob.failed_count + 1

        stmt = (
            update(ScreeningJob)
            .where(ScreeningJob.id == screening_job_id)
            .values(**values)
        )
        return self.db.execute(stmt).rowcount > 0

    def insert_result(self, screening_job_id: str, **fields) -> ScreeningResult:
        return self.add(ScreeningResult(screening_job_id=screening_job_id, **fields))

    def list_results(self, screening_job_id: str) -> List[ScreeningResult]:
        stmt = (
            select(ScreeningResult)
            .where(ScreeningResult.screening_job_id == screening_job_id)
            .order_by(ScreeningResult.created_at, ScreeningResult.id)
        )
        return self.fetch_all(stmt)

    def set_shortlisted(self, screening_job_id: str, result_ids: Iterable[str], shortlisted: bool) -> int:
        """
        Flip is_shortlisted on the job's matching results and resync the
        job's shortlisted_candidate_ids. Returns the matched id count.
        """
        ids = list(result_ids)
        matched = self.db.execute(
            select(ScreeningResult.id).where(
                ScreeningResult.screening_job_id == screening_job_id,
                ScreeningResult.id.in_(ids),
            )
        ).scalars().all()

        if matched:
            self.db.execute(
                update(ScreeningResult)
                .where(
                    ScreeningResult.screening_job_id == screening_job_id,
                    ScreeningResult.id.in_(matched),
                )
                .values(is_shortlisted=shortlisted)
            )

        shortlisted_ids = self.db.execute(
            select(ScreeningResult.id)
            .where(
                ScreeningResult.screening_job_id == screening_job_id,
                ScreeningResult.is_shortlisted.is_(True),
            )
            .order_by(ScreeningResult.created_at, ScreeningResult.id)
        ).scalars().all()

        self.db.execute(
            update(ScreeningJob)
            .where(ScreeningJob.id == screening_job_id)
            .values(shortlisted_candidate_ids=list(shortlisted_ids), updated_at=utcnow())
        )
        return len(matched)

    def delete_job(self, screening_job_id: str) -> bool:
        """Delete results first, then the job row."""
        self.db.execute(
            delete(ScreeningResult).where(ScreeningResult.screening_job_id == screening_job_id)
        )
        deleted = self.db.execute(
            delete(ScreeningJob).where(ScreeningJob.id == screening_job_id)
        ).rowcount
        return deleted > 0

    def list_jobs(self, employer_id: str, limit: int, offset: int) -> Tuple[List[ScreeningJob], int]:
        stmt = select(ScreeningJob).where(ScreeningJob.employer_id == employer_id)
        total = self.count(stmt)
        page = stmt.order_by(ScreeningJob.created_at.desc(), ScreeningJob.id).limit(limit).offset(offset)
        return self.fetch_all(page), total
