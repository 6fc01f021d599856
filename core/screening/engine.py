"""
Screening Engine - runs a batch of resumes against one job posting.

A batch is acknowledged immediately: the job row is created, moved to
'processing' and one scoring task per resume is queued on a fixed-size worker
pool. Each task ends either with a persisted result or a recorded skip, and
the batch's terminal status is computed once its task count drains to zero.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core.cache.screening_cache import ScreeningCacheService
from core.llm.interfaces import ScoringOracle
from core.screening.errors import (
    InvalidBatchError,
    JobNotFoundError,
    PartialScoringFailure,
)
from core.screening.models import (
    JobRequirements,
    JobStatus,
    Resume,
    ScreeningJobDTO,
)
from core.screening.resume_text import extract_resume_text
from core.screening.store import JobCatalog, ResultStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 5
KEEP_FINISHED_BATCHES = 50


@dataclass
class BatchTracker:
    """In-process bookkeeping for one running batch."""
    screening_job_id: str
    remaining: int
    succeeded: int = 0
    failures: List[PartialScoringFailure] = field(default_factory=list)
    cancelled: threading.Event = field(default_factory=threading.Event)
    finished: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def task_done(self, success: bool, failure: Optional[PartialScoringFailure] = None) -> bool:
        """Record one finished task. Returns True for the task that drains the batch."""
        with self.lock:
            if success:
                self.succeeded += 1
            if failure is not None:
                self.failures.append(failure)
            self.remaining -= 1
            return self.remaining == 0


class ScreeningEngine:
    """
    Orchestrates batch screening.

    Usage:
        engine = ScreeningEngine(store, catalog, oracle, cache=cache, max_workers=5)
        job = engine.submit_batch(job_post_id, employer_id, resumes)
        engine.wait(job.id, timeout=60)
    """

    def __init__(
        self,
        store: ResultStore,
        catalog: JobCatalog,
        oracle: ScoringOracle,
        cache: Optional[ScreeningCacheService] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        text_extractor: Callable[[Resume], str] = extract_resume_text,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.store = store
        self.catalog = catalog
        self.oracle = oracle
        self.cache = cache
        self.max_workers = max_workers
        self.text_extractor = text_extractor
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="screening")
        self._batches: Dict[str, BatchTracker] = {}
        self._batches_lock = threading.Lock()

    def submit_batch(self, job_post_id: str, employer_id: str, resumes: List[Resume]) -> ScreeningJobDTO:
        """
        Create a screening job and queue every resume for scoring.

        Raises:
            InvalidBatchError: Empty batch, missing or unknown job reference.
                No job is created in that case.
            PersistenceError: The batch could not be queued. The job row is
                removed again before the error propagates.
        """
        if not job_post_id:
            raise InvalidBatchError("Job reference is required", code="MISSING_JOB_REFERENCE")
        if not resumes:
            raise InvalidBatchError("At least 1 resume required", code="EMPTY_BATCH")

        requirements = self._load_requirements(str(job_post_id))
        if requirements is None:
            raise InvalidBatchError(f"Job {job_post_id} does not exist", code="UNKNOWN_JOB")

        logger.info(
            f"Initiating bulk screening: employer={employer_id} job={job_post_id} resumes={len(resumes)}"
        )

        job = self.store.create_job(str(employer_id), str(job_post_id), len(resumes))
        tracker = BatchTracker(screening_job_id=job.id, remaining=len(resumes))
        with self._batches_lock:
            self._batches[job.id] = tracker

        try:
            self.store.set_status(job.id, JobStatus.PROCESSING.value)
            job.status = JobStatus.PROCESSING.value

            for resume in resumes:
                self._executor.submit(self._process_resume, tracker, resume, requirements)
        except Exception as e:
            logger.error(f"Failed to queue screening job {job.id}: {e}")
            self._abandon(tracker)
            raise

        logger.info(f"Screening job {job.id} created and queued ({len(resumes)} resumes)")
        return job

    def get_status(self, screening_job_id: str) -> ScreeningJobDTO:
        job = self.store.get_job(screening_job_id)
        if job is None:
            raise JobNotFoundError(screening_job_id)
        return job

    def cancel(self, screening_job_id: str) -> bool:
        """Stop scoring the remaining resumes of a batch. False if it is not running."""
        with self._batches_lock:
            tracker = self._batches.get(screening_job_id)
        if tracker is None:
            return False
        tracker.cancelled.set()
        logger.info(f"Cancellation requested for screening job {screening_job_id}")
        return True

    def wait(self, screening_job_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the batch has drained. True if it finished (or is not running)."""
        with self._batches_lock:
            tracker = self._batches.get(screening_job_id)
        if tracker is None:
            return True
        return tracker.finished.wait(timeout)

    def failures(self, screening_job_id: str) -> List[PartialScoringFailure]:
        with self._batches_lock:
            tracker = self._batches.get(screening_job_id)
        if tracker is None:
            return []
        with tracker.lock:
            return list(tracker.failures)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # Private methods

    def _load_requirements(self, job_post_id: str) -> Optional[JobRequirements]:
        if self.cache is not None:
            cached = self.cache.get_job_requirements(job_post_id)
            if cached is not None:
                return cached

        requirements = self.catalog.get_requirements(job_post_id)
        if requirements is not None and self.cache is not None:
            self.cache.set_job_requirements(requirements)
        return requirements

    def _process_resume(self, tracker: BatchTracker, resume: Resume, requirements: JobRequirements) -> None:
        """Score and persist one resume. Never raises."""
        job_id = tracker.screening_job_id
        success = False
        failure = None
        try:
            if tracker.cancelled.is_set():
                logger.debug(f"Skipping {resume.filename}: screening job {job_id} was cancelled")
            else:
                success, failure = self._score_and_store(job_id, resume, requirements)
        except Exception as e:
            logger.error(f"Unexpected error processing {resume.filename} for {job_id}: {e}", exc_info=True)
            failure = PartialScoringFailure(job_id, resume.filename, str(e))
            self._count_failed_attempt(job_id, resume)

        if tracker.task_done(success, failure):
            self._finalize(tracker)

    def _abandon(self, tracker: BatchTracker) -> None:
        """Undo a batch that could not be queued: no tracker, no job row."""
        job_id = tracker.screening_job_id
        tracker.cancelled.set()
        tracker.finished.set()
        with self._batches_lock:
            self._batches.pop(job_id, None)
        try:
            self.store.delete_job(job_id)
        except Exception as e:
            logger.error(f"Could not remove unqueued screening job {job_id}: {e}")

    def _count_failed_attempt(self, job_id: str, resume: Resume) -> None:
        """Count a resume whose own store write failed, so processed_count still reaches the total."""
        try:
            if not self.store.record_failure(job_id):
                logger.info(f"Screening job {job_id} no longer exists; dropping failure record")
        except Exception as e:
            logger.error(f"Could not record failed resume {resume.filename} for screening job {job_id}: {e}")

    def _score_and_store(self, job_id: str, resume: Resume, requirements: JobRequirements):
        try:
            text = self.text_extractor(resume)
            analysis = self.oracle.score(text, requirements).validate()
        except Exception as e:
            logger.warning(f"Skipping {resume.filename} in screening job {job_id}: {e}")
            if not self.store.record_failure(job_id):
                logger.info(f"Screening job {job_id} no longer exists; dropping failure record")
            return False, PartialScoringFailure(job_id, resume.filename, str(e))

        result = self.store.add_result(
            job_id,
            resume.resolved_candidate_id(),
            resume.display_name(),
            resume.filename,
            analysis,
        )
        if result is None:
            logger.info(f"Screening job {job_id} no longer exists; dropping result for {resume.filename}")
            return False, None

        if self.cache is not None:
            self.cache.invalidate(job_id)

        logger.info(f"Resume {resume.filename} scored {analysis.match_percentage} for screening job {job_id}")
        return True, None

    def _finalize(self, tracker: BatchTracker) -> None:
        job_id = tracker.screening_job_id
        try:
            if tracker.cancelled.is_set():
                logger.info(f"Screening job {job_id} drained after cancellation")
                return

            status = JobStatus.COMPLETED if tracker.succeeded > 0 else JobStatus.FAILED
            if self.store.set_status(job_id, status.value):
                logger.info(
                    f"Screening job {job_id} {status.value}: "
                    f"{tracker.succeeded} scored, {len(tracker.failures)} skipped"
                )
            else:
                logger.info(f"Screening job {job_id} was deleted before completion")

            if self.cache is not None:
                self.cache.invalidate(job_id)
        except Exception as e:
            logger.error(f"Failed to finalize screening job {job_id}: {e}", exc_info=True)
        finally:
            tracker.finished.set()
            self._cleanup_finished_batches()

    def _cleanup_finished_batches(self, keep_count: int = KEEP_FINISHED_BATCHES) -> None:
        """Forget old finished batches, keeping only the most recent ones."""
        with self._batches_lock:
            finished = [tid for tid, t in self._batches.items() if t.finished.is_set()]
            for tid in finished[:-keep_count] if len(finished) > keep_count else []:
                del self._batches[tid]
