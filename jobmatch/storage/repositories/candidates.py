"""
Candidates Repository.

Responsibilities:
- Bulk-load eligible candidates with profile and skills attached.
- Convert ORM rows into Candidate value objects.

Non-Responsibilities:
- No scoring.
- No authentication.
"""

from typing import Iterator, List, Optional

from sqlalchemy.orm import selectinload

from ...database import ROLE_CANDIDATE, User
from ...models import Candidate, CandidateProfile, CandidateSkill, Location, SalaryRange


def to_candidate(user: User) -> Candidate:
    profile = None
    if user.profile is not None:
        p = user.profile
        profile = CandidateProfile(
            bio=p.bio,
            phone=p.phone,
            salary=SalaryRange(minimum=p.min_salary, maximum=p.max_salary, currency=p.currency),
            location=Location(
                country_id=p.country_id,
                state_id=p.state_id,
                city_id=p.city_id,
                area_id=p.area_id,
            ),
        )
    return Candidate(
        id=user.id,
        name=user.name,
        role=user.role,
        is_active=bool(user.is_active),
        profile=profile,
        skills=tuple(
            CandidateSkill(skill_id=s.skill_id, years_of_experience=s.years_of_experience or 0)
            for s in sorted(user.skills, key=lambda s: s.skill_id)
        ),
    )


def _eligible_query(session):
    return (
        session.query(User)
        .options(selectinload(User.profile), selectinload(User.skills))
        .filter(User.role == ROLE_CANDIDATE)
        .filter(User.is_active.is_(True))
        .filter(User.profile.has())
    )


def iter_eligible_candidates(session, chunk_size: int = 500) -> Iterator[List[Candidate]]:
    """Yield eligible candidates in pages of at most ``chunk_size``, ordered by id."""
    last_id = 0
    while True:
        rows = (
            _eligible_query(session)
            .filter(User.id > last_id)
            .order_by(User.id)
            .limit(chunk_size)
            .all()
        )
        if not rows:
            return
        last_id = rows[-1].id
        yield [to_candidate(r) for r in rows]


def get_candidate(session, candidate_id: int) -> Optional[Candidate]:
    """Any user by id as a Candidate, eligible or not."""
    user = (
        session.query(User)
        .options(selectinload(User.profile), selectinload(User.skills))
        .filter(User.id == candidate_id)
        .first()
    )
    return to_candidate(user) if user is not None else None


def get_user(session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)
