"""
Value objects consumed by the matching pipeline.

Data providers convert ORM rows into these fully-populated, immutable
records so that scoring never touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class Location:
    """Hierarchical location ids, any of which may be unset."""

    country_id: Optional[int] = None
    state_id: Optional[int] = None
    city_id: Optional[int] = None
    area_id: Optional[int] = None


@dataclass(frozen=True)
class SalaryRange:
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    currency: str = "BDT"

    @property
    def is_complete(self) -> bool:
        # Zero is treated as "not provided", same as a missing bound.
        return bool(self.minimum) and bool(self.maximum)

    @property
    def length(self) -> float:
        return float(self.maximum) - float(self.minimum)


@dataclass(frozen=True)
class CandidateSkill:
    skill_id: int
    years_of_experience: int = 0


@dataclass(frozen=True)
class CandidateProfile:
    bio: Optional[str] = None
    phone: Optional[str] = None
    salary: SalaryRange = field(default_factory=SalaryRange)
    location: Location = field(default_factory=Location)


@dataclass(frozen=True)
class Candidate:
    """A candidate user with profile and skills pre-attached."""

    id: int
    name: str = ""
    role: str = "candidate"
    is_active: bool = True
    profile: Optional[CandidateProfile] = None
    skills: Tuple[CandidateSkill, ...] = ()

    @property
    def skill_ids(self) -> FrozenSet[int]:
        return frozenset(s.skill_id for s in self.skills)


@dataclass(frozen=True)
class JobSkill:
    skill_id: int
    is_required: bool = True


@dataclass(frozen=True)
class Job:
    """A job posting with skills and location pre-attached."""

    id: int
    title: str = ""
    employer_id: Optional[int] = None
    status: str = "active"
    deadline: Optional[date] = None
    employment_type: str = "full_time"
    salary: SalaryRange = field(default_factory=SalaryRange)
    location: Location = field(default_factory=Location)
    experience_years: Optional[int] = None
    skills: Tuple[JobSkill, ...] = ()

    @property
    def required_skill_ids(self) -> FrozenSet[int]:
        return frozenset(s.skill_id for s in self.skills if s.is_required)

    @property
    def optional_skill_ids(self) -> FrozenSet[int]:
        return frozenset(s.skill_id for s in self.skills if not s.is_required)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-dimension sub-scores, each within [0, 1]."""

    skills: float
    location: float
    salary: float
    experience: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "skills": self.skills,
            "location": self.location,
            "salary": self.salary,
            "experience": self.experience,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreBreakdown":
        return cls(
            skills=float(data.get("skills", 0.0)),
            location=float(data.get("location", 0.0)),
            salary=float(data.get("salary", 0.0)),
            experience=float(data.get("experience", 0.0)),
        )


@dataclass(frozen=True)
class MatchScore:
    total: float
    breakdown: ScoreBreakdown


@dataclass(frozen=True)
class CandidateMatch:
    """On-demand result: a candidate scored against one job."""

    candidate: Candidate
    score: float
    breakdown: ScoreBreakdown


@dataclass(frozen=True)
class JobRecommendation:
    """On-demand result: a job scored against one candidate."""

    job: Job
    score: float
    breakdown: ScoreBreakdown


@dataclass
class SweepSummary:
    """Outcome of one matching sweep, including partial counts on failure."""

    success: bool = True
    matches_created: int = 0
    notifications_sent: int = 0
    duration_seconds: float = 0.0
    pairs_scored: int = 0
    pairs_skipped: int = 0
    pair_errors: int = 0
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "matches_created": self.matches_created,
            "notifications_sent": self.notifications_sent,
            "duration_seconds": self.duration_seconds,
            "pairs_scored": self.pairs_scored,
            "pairs_skipped": self.pairs_skipped,
            "pair_errors": self.pair_errors,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
