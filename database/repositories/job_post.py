import logging
from typing import Optional

from sqlalchemy import select

from database.models import JobPost
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class JobPostRepository(BaseRepository):
    def get_by_id(self, job_post_id: str) -> Optional[JobPost]:
        stmt = select(JobPost).where(JobPost.id == str(job_post_id))
        return self.fetch_one(stmt)

    def create_job_post(self, employer_id: str, title: str, **fields) -> JobPost:
        """Used by fixtures and seeding; the screening subsystem never writes job posts."""
        return self.add(JobPost(employer_id=employer_id, title=title, **fields))
