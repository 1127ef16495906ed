"""
Matches Repository.

Responsibilities:
- Find-or-create match rows by (job, candidate) pair.
- Query persisted matches for candidates and jobs.
- Transaction-safe writes.

Non-Responsibilities:
- No scoring.
- No authorization decisions.

Invariant:
At most one row exists per (job_posting_id, candidate_id). An existing
row is never rescored; only ``notification_sent`` may change.
"""

from typing import Dict, List, Mapping, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import joinedload

from ...database import JobMatch, JobPosting, User
from ...models import ScoreBreakdown

SCORE_PRECISION = 4


def get_match(session, job_id: int, candidate_id: int) -> Optional[JobMatch]:
    return (
        session.query(JobMatch)
        .filter(JobMatch.job_posting_id == job_id, JobMatch.candidate_id == candidate_id)
        .first()
    )


def create_match(
    session,
    job_id: int,
    candidate_id: int,
    score: float,
    reasons: Union[ScoreBreakdown, Mapping[str, float]],
) -> Tuple[JobMatch, bool]:
    """
    Return the match for the pair, creating it if absent.

    A concurrent writer inserting the same pair trips the unique
    constraint; the loser rolls back and returns the winner's row.

    Args:
        session: SQLAlchemy session
        job_id: Job posting id
        candidate_id: Candidate user id
        score: Total score in [0, 1]
        reasons: Per-dimension breakdown

    Returns:
        Tuple of (match, created)
    """
    existing = get_match(session, job_id, candidate_id)
    if existing is not None:
        return existing, False

    if isinstance(reasons, ScoreBreakdown):
        reasons = reasons.as_dict()

    match = JobMatch(
        job_posting_id=job_id,
        candidate_id=candidate_id,
        total_score=round(float(score), SCORE_PRECISION),
        match_reasons=dict(reasons),
        notification_sent=False,
    )
    session.add(match)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        existing = get_match(session, job_id, candidate_id)
        if existing is None:
            raise
        return existing, False
    except OperationalError:
        session.rollback()
        raise
    return match, True


def matches_for_job_map(session, job_id: int) -> Dict[int, JobMatch]:
    """Existing matches of one job keyed by candidate id."""
    rows = session.query(JobMatch).filter(JobMatch.job_posting_id == job_id).all()
    return {m.candidate_id: m for m in rows}


def _ordered(query):
    return query.order_by(
        JobMatch.total_score.desc(),
        JobMatch.created_at.desc(),
        JobMatch.id.desc(),
    )


def matches_for_candidate(session, candidate_id: int, min_score: float = 0.0) -> List[JobMatch]:
    """Matches of a candidate at or above ``min_score``, best and newest first."""
    query = (
        session.query(JobMatch)
        .options(joinedload(JobMatch.job_posting).selectinload(JobPosting.skills))
        .filter(JobMatch.candidate_id == candidate_id)
        .filter(JobMatch.total_score >= min_score)
    )
    return _ordered(query).all()


def matches_for_job(session, job_id: int, min_score: float = 0.0) -> List[JobMatch]:
    """Matches of a job at or above ``min_score``, best and newest first."""
    query = (
        session.query(JobMatch)
        .options(
            joinedload(JobMatch.candidate).selectinload(User.profile),
            joinedload(JobMatch.candidate).selectinload(User.skills),
        )
        .filter(JobMatch.job_posting_id == job_id)
        .filter(JobMatch.total_score >= min_score)
    )
    return _ordered(query).all()


def mark_notification_sent(session, match: JobMatch) -> None:
    """Flip the flag; the caller owns the transaction."""
    match.notification_sent = True
    session.add(match)
