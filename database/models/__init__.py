from .base import Base
from .screening import ScreeningJob, ScreeningResult
from .job import JobPost

__all__ = [
    'Base',
    'ScreeningJob',
    'ScreeningResult',
    'JobPost',
]
