"""
Scoring Logic for Candidate/Job Matching (v1).

Responsibilities:
- Combine dimension scores into a weighted total.
- Emit a score breakdown alongside the total.
- Apply the admission threshold.

Non-Responsibilities:
- No database access.
- No eligibility filtering.

Invariant:
Given identical inputs and configuration, this module must always return
the same total and breakdown.
"""

from typing import Optional

from ...config import MatchingConfig
from ...models import Candidate, Job, MatchScore, ScoreBreakdown
from .features import experience_score, location_score, salary_score, skills_score

SCORE_PRECISION = 4


class MatchAggregator:
    """Weighted-sum scorer driven by an explicit MatchingConfig."""

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()

    def breakdown(self, job: Job, candidate: Candidate) -> ScoreBreakdown:
        return ScoreBreakdown(
            skills=skills_score(job, candidate),
            location=location_score(job, candidate),
            salary=salary_score(job, candidate),
            experience=experience_score(job, candidate),
        )

    def aggregate(self, breakdown: ScoreBreakdown) -> MatchScore:
        """Weighted total of the breakdown, rounded to 4 decimal places."""
        weights = self.config.weights.as_dict()
        scores = breakdown.as_dict()
        total = sum(weights[name] * scores[name] for name in weights)
        return MatchScore(total=round(total, SCORE_PRECISION), breakdown=breakdown)

    def score(self, job: Job, candidate: Candidate) -> MatchScore:
        return self.aggregate(self.breakdown(job, candidate))

    def is_admissible(self, total: float) -> bool:
        return total >= self.config.admission_threshold

    def is_notifiable(self, total: float) -> bool:
        return total >= self.config.notification_threshold
