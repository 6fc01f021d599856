import uuid

from sqlalchemy import Column, Integer, Text, DateTime, JSON, String

from .base import Base
from .screening import utcnow


class JobPost(Base):
    """
    Job posting reference data.

    Owned by the job management side of the platform; screening only reads it.
    """
    __tablename__ = 'job_post'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    employer_id = Column(Text, nullable=False, index=True)

    title = Column(Text, nullable=False)
    description = Column(Text)
    required_skills = Column(JSON, nullable=False, default=list)
    nice_to_have_skills = Column(JSON, nullable=False, default=list)
    years_of_experience = Column(Integer)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
