"""
Scoring Oracle Interface - Abstract base for resume scoring providers.

An oracle compares one resume's text with a job's requirements and returns a
match percentage plus the skill and feedback breakdown.
"""
from abc import ABC, abstractmethod

from core.screening.models import JobRequirements, OracleAnalysis


class ScoringOracle(ABC):
    """
    Abstract interface for resume scoring providers (keyword matcher, OpenAI, etc.).

    Implementations raise on failure; the screening engine records the failure
    against the single resume and carries on with the batch.
    """

    @abstractmethod
    def score(self, resume_text: str, requirements: JobRequirements) -> OracleAnalysis:
        """
        Score a resume against a job.

        Returns:
            OracleAnalysis with match_percentage in 0..100, matched/missing
            skills, strengths, gaps and recommendations.
        """
        pass
