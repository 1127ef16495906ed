"""
Jobs Repository.

Responsibilities:
- Bulk-load active job postings with their skills attached.
- Convert ORM rows into Job value objects.

Non-Responsibilities:
- No scoring.
- No match persistence.

Invariant:
Repositories must not encode domain decisions beyond the eligibility
query itself.
"""

from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from ...database import JOB_STATUS_ACTIVE, JobPosting
from ...models import Job, JobSkill, Location, SalaryRange


def to_job(posting: JobPosting) -> Job:
    return Job(
        id=posting.id,
        title=posting.title,
        employer_id=posting.user_id,
        status=posting.status,
        deadline=posting.deadline,
        employment_type=posting.employment_type,
        salary=SalaryRange(
            minimum=posting.min_salary,
            maximum=posting.max_salary,
            currency=posting.currency,
        ),
        location=Location(
            country_id=posting.country_id,
            state_id=posting.state_id,
            city_id=posting.city_id,
            area_id=posting.area_id,
        ),
        experience_years=posting.experience_years,
        skills=tuple(
            JobSkill(skill_id=s.skill_id, is_required=bool(s.is_required))
            for s in sorted(posting.skills, key=lambda s: s.skill_id)
        ),
    )


def _active_query(session, today: date):
    return (
        session.query(JobPosting)
        .options(selectinload(JobPosting.skills))
        .filter(JobPosting.status == JOB_STATUS_ACTIVE)
        .filter(or_(JobPosting.deadline.is_(None), JobPosting.deadline >= today))
    )


def iter_active_jobs(session, chunk_size: int = 500, today: Optional[date] = None) -> Iterator[List[Job]]:
    """
    Yield active jobs in pages of at most ``chunk_size``, ordered by id.

    Keyset pagination keeps pages stable while matches are being written.
    """
    today = today or date.today()
    last_id = 0
    while True:
        rows = (
            _active_query(session, today)
            .filter(JobPosting.id > last_id)
            .order_by(JobPosting.id)
            .limit(chunk_size)
            .all()
        )
        if not rows:
            return
        last_id = rows[-1].id
        yield [to_job(r) for r in rows]


def get_job(session, job_id: int) -> Optional[Job]:
    posting = (
        session.query(JobPosting)
        .options(selectinload(JobPosting.skills))
        .filter(JobPosting.id == job_id)
        .first()
    )
    return to_job(posting) if posting is not None else None
