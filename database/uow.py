import contextlib
import logging

from sqlalchemy.orm import sessionmaker

from database.repositories.job_post import JobPostRepository
from database.repositories.screening import ScreeningRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def screening_uow(session_factory: sessionmaker):
    """Per-unit-of-work transaction scope.

    Yields a ScreeningRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with screening_uow(SessionLocal) as repo:
            repo.increment_processed(job_id)
        # commit happens automatically on successful exit
    """
    session = session_factory()
    try:
        repo = ScreeningRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextlib.contextmanager
def job_post_uow(session_factory: sessionmaker):
    """Read-only scope over job postings. Always rolls back and closes."""
    session = session_factory()
    try:
        yield JobPostRepository(session)
    finally:
        session.rollback()
        session.close()
