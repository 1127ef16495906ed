"""
Applications Repository.

Responsibilities:
- Answer whether a candidate already applied to a job.

Non-Responsibilities:
- No application lifecycle changes.
"""

from typing import Iterable, Optional, Set, Tuple

from sqlalchemy import exists

from ...database import Application


def has_applied(session, job_id: int, candidate_id: int) -> bool:
    return session.query(
        exists().where(
            Application.job_posting_id == job_id,
            Application.user_id == candidate_id,
        )
    ).scalar()


def applied_pairs(
    session,
    job_ids: Optional[Iterable[int]] = None,
    candidate_ids: Optional[Iterable[int]] = None,
) -> Set[Tuple[int, int]]:
    """
    Bulk-fetch (job_id, candidate_id) pairs that have an application.

    Args:
        session: SQLAlchemy session
        job_ids: Restrict to these jobs (all jobs if None)
        candidate_ids: Restrict to these candidates (all candidates if None)

    Returns:
        Set of (job_posting_id, user_id) tuples
    """
    query = session.query(Application.job_posting_id, Application.user_id)
    if job_ids is not None:
        query = query.filter(Application.job_posting_id.in_(list(job_ids)))
    if candidate_ids is not None:
        query = query.filter(Application.user_id.in_(list(candidate_ids)))
    return {(job_id, user_id) for job_id, user_id in query.all()}
