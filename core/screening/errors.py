"""
Screening error taxonomy.

Validation and not-found errors surface to the caller; persistence errors are
logged with context and surfaced generically. Per-resume scoring failures are
recorded as PartialScoringFailure and never raised out of a batch.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


class ScreeningError(Exception):
    """Base exception for the screening subsystem."""
    code = "SCREENING_ERROR"


class ValidationError(ScreeningError):
    """Bad input shape or range."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


class InvalidBatchError(ValidationError):
    """Empty batch or missing job reference."""
    code = "INVALID_BATCH"


class NotFoundError(ScreeningError):
    code = "NOT_FOUND"


class JobNotFoundError(NotFoundError):
    """Raised when a screening job id does not exist."""
    code = "SCREENING_JOB_NOT_FOUND"

    def __init__(self, screening_job_id):
        super().__init__(f"Screening job {screening_job_id} not found")
        self.screening_job_id = screening_job_id


class PersistenceError(ScreeningError):
    """Storage layer failure. The message is safe to show; the cause is not."""
    code = "DATABASE_ERROR"


class ScoringError(ScreeningError):
    """Raised by an oracle when a single resume cannot be scored."""
    code = "SCORING_ERROR"


@dataclass
class PartialScoringFailure:
    """A resume that was attempted but produced no result."""
    screening_job_id: str
    filename: str
    reason: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
