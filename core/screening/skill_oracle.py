"""
Skill Match Oracle - deterministic, local scoring.

Scores a resume by matching the job's required and nice-to-have skills against
the resume text. Used as the default oracle and whenever no LLM endpoint is
configured.

Weights:
- Required skill coverage: 60%
- Experience: 20%
- Strengths alignment with the job description: 10%
- Raw skill match percentage: 10%
"""
import logging
import re
from typing import List, Optional

from core.llm.interfaces import ScoringOracle
from core.screening.errors import ScoringError
from core.screening.models import JobRequirements, OracleAnalysis

logger = logging.getLogger(__name__)

NICE_TO_HAVE_MAX_BONUS = 20.0
MISSING_SKILL_MAX_PENALTY = 40.0
NEUTRAL_SCORE = 50.0

_STOPWORDS = {
    'about', 'would', 'could', 'should', 'their', 'which', 'these',
    'those', 'have', 'from', 'they', 'been', 'your', 'with', 'will',
    'other', 'where', 'there', 'while',
}

_YEARS_PATTERN = re.compile(r"(\d{1,2})\+?\s*(?:years?|yrs?)", re.IGNORECASE)

_STRENGTH_HINTS = (
    'led', 'managed', 'designed', 'built', 'mentored', 'architected',
    'launched', 'improved', 'owned', 'delivered',
)


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text.lower()).strip()


def _contains_skill(text: str, skill: str) -> bool:
    skill = skill.strip().lower()
    if not skill:
        return False
    pattern = r"(?<![a-z0-9])" + re.escape(skill) + r"(?![a-z0-9])"
    return re.search(pattern, text) is not None


def extract_keywords(text: str, limit: int = 20) -> List[str]:
    """Distinct words longer than four characters, stopwords removed."""
    seen = []
    for word in re.findall(r"[a-z][a-z0-9+#.-]*", text.lower()):
        if len(word) > 4 and word not in _STOPWORDS and word not in seen:
            seen.append(word)
    return seen[:limit]


def extract_years_of_experience(text: str) -> Optional[int]:
    years = [int(m) for m in _YEARS_PATTERN.findall(text)]
    return max(years) if years else None


class SkillMatchOracle(ScoringOracle):
    """Keyword and skill coverage based scoring."""

    def score(self, resume_text: str, requirements: JobRequirements) -> OracleAnalysis:
        text = _normalize(resume_text or "")
        if not text:
            raise ScoringError("Resume has no extractable text")

        required = [s for s in requirements.required_skills if s and s.strip()]
        nice = [s for s in requirements.nice_to_have_skills if s and s.strip()]

        matched = [s for s in required if _contains_skill(text, s)]
        missing = [s for s in required if s not in matched]
        matched_nice = [s for s in nice if _contains_skill(text, s)]

        skill_score = self.skill_match_score(len(matched), len(missing), len(required), len(matched_nice), len(nice))
        experience_score = self.experience_score(extract_years_of_experience(text), requirements.years_of_experience)
        strengths = self._strengths(text, matched, matched_nice)
        strengths_score = self.strengths_score(strengths, requirements.description)
        raw_match = self.match_percentage(len(matched), len(required), len(matched_nice), len(nice))

        total = skill_score * 0.6 + experience_score * 0.2 + strengths_score * 0.1 + raw_match * 0.1
        percentage = float(round(min(100.0, max(0.0, total))))

        logger.debug(
            f"Scored resume for job {requirements.job_post_id}: {percentage} "
            f"({len(matched)}/{len(required)} required skills)"
        )

        return OracleAnalysis(
            match_percentage=percentage,
            matched_skills=matched + [s for s in matched_nice if s not in matched],
            missing_skills=missing,
            strengths=strengths,
            gaps=[f"No evidence of {skill}" for skill in missing],
            recommendations=self._recommendations(missing, experience_score),
        )

    @staticmethod
    def match_percentage(matched: int, required: int, matched_nice: int, nice: int) -> float:
        """Required coverage plus up to 20 points for nice-to-have skills, capped at 100."""
        if required == 0:
            return 0.0
        required_match = matched / required * 100
        nice_match = matched_nice / nice * NICE_TO_HAVE_MAX_BONUS if nice else 0.0
        return min(100.0, required_match + nice_match)

    @staticmethod
    def skill_match_score(matched: int, missing: int, required: int, matched_nice: int, nice: int) -> float:
        if required == 0:
            return 100.0
        coverage = matched / required * 100
        bonus = min(NICE_TO_HAVE_MAX_BONUS, matched_nice / nice * NICE_TO_HAVE_MAX_BONUS) if nice else 0.0
        penalty = min(MISSING_SKILL_MAX_PENALTY, missing / required * MISSING_SKILL_MAX_PENALTY)
        return max(0.0, min(100.0, coverage + bonus - penalty))

    @staticmethod
    def experience_score(candidate_years: Optional[int], required_years: Optional[int]) -> float:
        """
        Neutral when either side is unknown; otherwise scaled by the ratio
        of candidate years to required years.
        """
        if candidate_years is None or not required_years:
            return NEUTRAL_SCORE
        ratio = candidate_years / required_years
        if ratio < 0.5:
            return 30.0
        if ratio < 1:
            return NEUTRAL_SCORE
        if ratio < 2:
            return 70.0
        if ratio < 3:
            return 90.0
        return 100.0

    @staticmethod
    def strengths_score(strengths: List[str], job_description: str) -> float:
        if not strengths:
            return NEUTRAL_SCORE
        keywords = extract_keywords(job_description or "")
        if not keywords:
            return NEUTRAL_SCORE
        aligned = [s for s in strengths if any(k in s.lower() for k in keywords)]
        return len(aligned) / len(strengths) * 100

    @staticmethod
    def _strengths(text: str, matched: List[str], matched_nice: List[str]) -> List[str]:
        strengths = [f"Experience with {skill}" for skill in matched[:5]]
        strengths.extend(f"Bonus skill: {skill}" for skill in matched_nice[:3])
        hints = [hint for hint in _STRENGTH_HINTS if re.search(rf"\b{hint}\b", text)]
        if hints:
            strengths.append(f"Ownership signals: {', '.join(hints[:3])}")
        return strengths

    @staticmethod
    def _recommendations(missing: List[str], experience_score: float) -> List[str]:
        recommendations = [f"Ask about {skill} in the interview" for skill in missing[:3]]
        if experience_score < NEUTRAL_SCORE:
            recommendations.append("Verify depth of experience against the role's seniority")
        if not missing:
            recommendations.append("Covers all required skills; prioritize for review")
        return recommendations
