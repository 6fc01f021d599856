from database.repositories.base import BaseRepository
from database.repositories.job_post import JobPostRepository
from database.repositories.screening import ScreeningRepository

__all__ = [
    'BaseRepository',
    'JobPostRepository',
    'ScreeningRepository',
]
