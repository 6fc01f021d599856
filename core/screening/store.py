"""
Storage interfaces for the screening subsystem.

ResultStore owns ScreeningJob and ScreeningResult persistence. JobCatalog is
the read-only window onto job postings. Both are injected into the engine and
the read-side services so tests can substitute in-memory implementations.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from core.screening.models import (
    JobRequirements,
    OracleAnalysis,
    ScreeningJobDTO,
    ScreeningResultDTO,
)


class JobCatalog(ABC):
    """Read-only access to job posting reference data."""

    @abstractmethod
    def get_requirements(self, job_post_id: str) -> Optional[JobRequirements]:
        """Return the job's screening requirements, or None if it does not exist."""
        pass


class ResultStore(ABC):
    """Persistence for screening jobs and their results."""

    @abstractmethod
    def create_job(self, employer_id: str, job_post_id: str, total_resumes: int) -> ScreeningJobDTO:
        """Create a job in 'pending' status with processed_count = 0."""
        pass

    @abstractmethod
    def get_job(self, screening_job_id: str) -> Optional[ScreeningJobDTO]:
        pass

    @abstractmethod
    def set_status(self, screening_job_id: str, status: str) -> bool:
        """Set the job status. Returns False if the job no longer exists."""
        pass

    @abstractmethod
    def add_result(
        self,
        screening_job_id: str,
        candidate_id: str,
        candidate_name: str,
        resume_filename: Optional[str],
        analysis: OracleAnalysis,
    ) -> Optional[ScreeningResultDTO]:
        """
        Persist one result and atomically increment processed_count.

        Both happen in one transaction. Returns None, without inserting
        anything, when the job has been deleted in the meantime.
        """
        pass

    @abstractmethod
    def record_failure(self, screening_job_id: str) -> bool:
        """
        Atomically increment processed_count and failed_count for a skipped resume.

        Returns False when the job has been deleted in the meantime.
        """
        pass

    @abstractmethod
    def list_results(self, screening_job_id: str) -> List[ScreeningResultDTO]:
        """All results for a job ordered by (created_at, id)."""
        pass

    @abstractmethod
    def set_shortlisted(self, screening_job_id: str, result_ids: Iterable[str], shortlisted: bool) -> int:
        """
        Set is_shortlisted on the job's results whose id is in result_ids.

        Ids belonging to other jobs are ignored. Returns how many of the given
        ids matched a result of this job.
        """
        pass

    @abstractmethod
    def delete_job(self, screening_job_id: str) -> bool:
        """Delete results then the job in one transaction. False if absent."""
        pass

    @abstractmethod
    def list_jobs(self, employer_id: str, limit: int, offset: int) -> Tuple[List[ScreeningJobDTO], int]:
        """An employer's jobs, newest first, with the unpaginated total."""
        pass
