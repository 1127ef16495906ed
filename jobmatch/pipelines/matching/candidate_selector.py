"""
Eligibility Filters for Candidate/Job Matching.

Responsibilities:
- Decide whether a job or a candidate may take part in matching.
- Decide whether a (job, candidate) pair should be scored at all.

Non-Responsibilities:
- No scoring.
- No database access.

Invariant:
The same filters apply to the sweep and to on-demand queries.
"""

from datetime import date
from typing import AbstractSet, Optional, Tuple

from ...database import JOB_STATUS_ACTIVE, ROLE_CANDIDATE
from ...models import Candidate, Job


def is_job_eligible(job: Job, today: Optional[date] = None) -> bool:
    """Active status and no deadline, or a deadline not yet passed."""
    if job.status != JOB_STATUS_ACTIVE:
        return False
    if job.deadline is None:
        return True
    return job.deadline >= (today or date.today())


def is_candidate_eligible(candidate: Candidate) -> bool:
    """Active user with the candidate role and a profile."""
    return (
        candidate.role == ROLE_CANDIDATE
        and candidate.is_active
        and candidate.profile is not None
    )


def should_score_pair(
    job: Job,
    candidate: Candidate,
    applied: AbstractSet[Tuple[int, int]],
) -> bool:
    """A pair with an application is never scored."""
    return (job.id, candidate.id) not in applied
