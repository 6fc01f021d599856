"""
Screening data transfer objects.

Plain dataclasses passed between the store, the engine and the read-side
services. Storage implementations convert their rows into these so callers
never hold a live ORM session.
"""
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

STRONG_MATCH_THRESHOLD = 70.0
MODERATE_MATCH_THRESHOLD = 50.0


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class MatchCategory(str, Enum):
    ALL = "all"
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


class SortField(str, Enum):
    RANK = "rank"
    MATCH = "match"
    NAME = "name"


class ShortlistAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


def categorize_match(match_percentage: float) -> MatchCategory:
    """Strong >= 70, moderate 50-69, weak < 50."""
    if match_percentage >= STRONG_MATCH_THRESHOLD:
        return MatchCategory.STRONG
    if match_percentage >= MODERATE_MATCH_THRESHOLD:
        return MatchCategory.MODERATE
    return MatchCategory.WEAK


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Resume:
    """One uploaded resume document."""
    filename: str
    content: bytes
    content_type: str = "application/pdf"
    candidate_id: Optional[str] = None
    candidate_name: Optional[str] = None

    def display_name(self) -> str:
        if self.candidate_name:
            return self.candidate_name
        return Path(self.filename).stem.replace("_", " ").replace("-", " ").strip() or self.filename

    def resolved_candidate_id(self) -> str:
        return self.candidate_id or str(uuid.uuid4())


@dataclass
class JobRequirements:
    """Read-only view of a job posting's screening requirements."""
    job_post_id: str
    title: str = ""
    description: str = ""
    required_skills: List[str] = field(default_factory=list)
    nice_to_have_skills: List[str] = field(default_factory=list)
    years_of_experience: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRequirements":
        return cls(
            job_post_id=str(data["job_post_id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            required_skills=list(data.get("required_skills") or []),
            nice_to_have_skills=list(data.get("nice_to_have_skills") or []),
            years_of_experience=data.get("years_of_experience"),
        )


@dataclass
class OracleAnalysis:
    """What a scoring oracle returns for one resume."""
    match_percentage: float
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    gaps: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def validate(self) -> "OracleAnalysis":
        try:
            value = float(self.match_percentage)
        except (TypeError, ValueError):
            raise ValueError(f"match_percentage is not numeric: {self.match_percentage!r}")
        if value != value or value < 0 or value > 100:
            raise ValueError(f"match_percentage out of range 0-100: {self.match_percentage!r}")
        return replace(self, match_percentage=round(value, 2))


@dataclass
class ScreeningJobDTO:
    id: str
    employer_id: str
    job_post_id: str
    status: str
    total_resumes: int
    processed_count: int = 0
    failed_count: int = 0
    shortlisted_candidate_ids: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def progress(self) -> float:
        if not self.total_resumes:
            return 0.0
        return round(self.processed_count / self.total_resumes * 100, 2)


@dataclass
class ScreeningResultDTO:
    id: str
    screening_job_id: str
    candidate_id: str
    match_percentage: float
    candidate_name: str = ""
    resume_filename: Optional[str] = None
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    improvement_areas: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    is_shortlisted: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def category(self) -> MatchCategory:
        return categorize_match(self.match_percentage)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScreeningResultDTO":
        values = dict(data)
        created_at = values.get("created_at")
        if isinstance(created_at, str):
            values["created_at"] = datetime.fromisoformat(created_at)
        return cls(**values)


@dataclass(frozen=True)
class ResultFilter:
    min_match: Optional[float] = None
    max_match: Optional[float] = None
    category: MatchCategory = MatchCategory.ALL
    shortlisted_only: bool = False

    def normalized(self) -> Tuple:
        return (
            None if self.min_match is None else float(self.min_match),
            None if self.max_match is None else float(self.max_match),
            MatchCategory(self.category).value,
            bool(self.shortlisted_only),
        )


@dataclass(frozen=True)
class ResultSort:
    sort_by: SortField = SortField.RANK
    descending: bool = False

    def normalized(self) -> Tuple:
        return (SortField(self.sort_by).value, bool(self.descending))


@dataclass
class RankedItem:
    rank: int
    result: ScreeningResultDTO

    @property
    def category(self) -> MatchCategory:
        return self.result.category

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, "result": self.result.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankedItem":
        return cls(rank=int(data["rank"]), result=ScreeningResultDTO.from_dict(data["result"]))


@dataclass
class RankedView:
    """One filtered, sorted, paginated page of a job's results."""
    items: List[RankedItem]
    total: int
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "offset": self.offset,
            "limit": self.limit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankedView":
        return cls(
            items=[RankedItem.from_dict(i) for i in data.get("items", [])],
            total=int(data["total"]),
            offset=int(data["offset"]),
            limit=int(data["limit"]),
        )
