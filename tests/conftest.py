"""
Pytest configuration and shared fixtures.
"""

import os

os.environ.setdefault("JOBMATCH_LOG_TO_FILE", "0")

import pytest
from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from jobmatch.database import (
    Application,
    JobPosting,
    JobSkill,
    Skill,
    User,
    UserProfile,
    UserSkill,
    get_session_factory,
    init_database,
)
from jobmatch.logger import StructuredLogger, reset_logger


@pytest.fixture(autouse=True)
def _reset_global_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no handlers attached."""
    return StructuredLogger(name="jobmatch.test", enable_console=False, enable_file=False)


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "jobmatch.db"
    init_database(path)
    return path


@pytest.fixture
def session_factory(db_path):
    return get_session_factory(db_path)


@pytest.fixture
def db_session(session_factory):
    """Create a temporary database and return a session."""
    session = session_factory()
    yield session
    session.close()


class Seeder:
    """Builds rows for tests with sensible defaults."""

    def __init__(self, session):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def skill(self, name: Optional[str] = None) -> Skill:
        skill = Skill(name=name or f"skill-{self._next()}")
        self.session.add(skill)
        self.session.commit()
        return skill

    def employer(self, name: str = "Acme HR", role: str = "employer") -> User:
        n = self._next()
        user = User(name=name, email=f"{role}{n}@example.com", role=role)
        self.session.add(user)
        self.session.commit()
        return user

    def candidate(
        self,
        name: str = "Candidate",
        skills: Sequence[Tuple[Skill, int]] = (),
        salary: Tuple[Optional[float], Optional[float]] = (None, None),
        location: Optional[Dict[str, int]] = None,
        with_profile: bool = True,
        is_active: bool = True,
        role: str = "candidate",
    ) -> User:
        n = self._next()
        user = User(name=name, email=f"cand{n}@example.com", role=role, is_active=is_active)
        self.session.add(user)
        self.session.flush()
        if with_profile:
            self.session.add(UserProfile(
                user_id=user.id,
                min_salary=salary[0],
                max_salary=salary[1],
                **(location or {}),
            ))
        for skill, years in skills:
            self.session.add(UserSkill(user_id=user.id, skill_id=skill.id, years_of_experience=years))
        self.session.commit()
        return user

    def job(
        self,
        employer: User,
        title: str = "Backend Engineer",
        skills: Sequence[Tuple[Skill, bool]] = (),
        salary: Tuple[Optional[float], Optional[float]] = (None, None),
        location: Optional[Dict[str, int]] = None,
        experience_years: Optional[int] = None,
        status: str = "active",
        deadline: Optional[date] = None,
    ) -> JobPosting:
        posting = JobPosting(
            user_id=employer.id,
            title=title,
            description=f"{title} role",
            status=status,
            deadline=deadline,
            min_salary=salary[0],
            max_salary=salary[1],
            experience_years=experience_years,
            **(location or {}),
        )
        self.session.add(posting)
        self.session.flush()
        for skill, required in skills:
            self.session.add(JobSkill(job_posting_id=posting.id, skill_id=skill.id, is_required=required))
        self.session.commit()
        return posting

    def application(self, job: JobPosting, candidate: User) -> Application:
        app = Application(job_posting_id=job.id, user_id=candidate.id)
        self.session.add(app)
        self.session.commit()
        return app


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture
def scenario(seed):
    """
    One employer, one job and one strong candidate.

    Job: skill A required, skill B optional, salary 50k-70k, city 10,
    2 years of experience. Candidate: A for 3 years, salary 55k-65k,
    city 10. Expected total 0.75.
    """
    skill_a = seed.skill("python")
    skill_b = seed.skill("sql")
    employer = seed.employer()
    job = seed.job(
        employer,
        title="Python Developer",
        skills=[(skill_a, True), (skill_b, False)],
        salary=(50000, 70000),
        location={"country_id": 1, "state_id": 5, "city_id": 10},
        experience_years=2,
    )
    candidate = seed.candidate(
        name="Rahim",
        skills=[(skill_a, 3)],
        salary=(55000, 65000),
        location={"country_id": 1, "state_id": 5, "city_id": 10},
    )
    return {"employer": employer, "job": job, "candidate": candidate, "skills": (skill_a, skill_b)}
