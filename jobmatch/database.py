"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for users, job postings, applications,
matches and notifications.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from sqlalchemy import (
    create_engine,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()

ROLE_CANDIDATE = "candidate"
ROLE_EMPLOYER = "employer"
ROLE_ADMIN = "admin"

JOB_STATUS_ACTIVE = "active"

NOTIFICATION_JOB_MATCH = "job_match"


class User(Base):
    """Platform user: candidate, employer or admin."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default=ROLE_CANDIDATE)  # candidate, employer, admin
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    profile = relationship("UserProfile", back_populates="user", uselist=False)
    skills = relationship("UserSkill", back_populates="user")


class UserProfile(Base):
    """Candidate profile: contact, salary expectations and location."""

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    bio = Column(Text)
    phone = Column(String)
    min_salary = Column(Numeric(10, 2, asdecimal=False))
    max_salary = Column(Numeric(10, 2, asdecimal=False))
    currency = Column(String(3), nullable=False, default="BDT")
    country_id = Column(Integer)
    state_id = Column(Integer)
    city_id = Column(Integer)
    area_id = Column(Integer)

    user = relationship("User", back_populates="profile")

    __table_args__ = (
        Index("ix_user_profiles_location", "country_id", "state_id", "city_id", "area_id"),
    )


class Skill(Base):
    """Reference skill."""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)


class UserSkill(Base):
    """Skill held by a candidate, with years of experience."""

    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    proficiency_level = Column(String, nullable=False, default="intermediate")
    years_of_experience = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="skills")

    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),
    )


class JobPosting(Base):
    """Job posting owned by an employer."""

    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # employer
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    employment_type = Column(String, nullable=False, default="full_time")
    status = Column(String, nullable=False, default=JOB_STATUS_ACTIVE)  # active, closed, draft, archived
    deadline = Column(Date)
    min_salary = Column(Numeric(10, 2, asdecimal=False))
    max_salary = Column(Numeric(10, 2, asdecimal=False))
    currency = Column(String(3), nullable=False, default="BDT")
    country_id = Column(Integer)
    state_id = Column(Integer)
    city_id = Column(Integer)
    area_id = Column(Integer)
    experience_years = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    skills = relationship("JobSkill", back_populates="job_posting")

    __table_args__ = (
        Index("ix_job_postings_status_deadline", "status", "deadline"),
    )


class JobSkill(Base):
    """Skill attached to a job posting, required or optional."""

    __tablename__ = "job_skills"

    id = Column(Integer, primary_key=True)
    job_posting_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    is_required = Column(Boolean, nullable=False, default=True)

    job_posting = relationship("JobPosting", back_populates="skills")

    __table_args__ = (
        UniqueConstraint("job_posting_id", "skill_id", name="uq_job_skills_job_skill"),
    )


class Application(Base):
    """A candidate's application to a job posting."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True)
    job_posting_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # candidate
    status = Column(String, nullable=False, default="pending")
    applied_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        UniqueConstraint("job_posting_id", "user_id", name="uq_applications_job_user"),
    )


class JobMatch(Base):
    """
    Scored pairing of a job posting and a candidate.

    Immutable once created except for ``notification_sent``.
    """

    __tablename__ = "job_matches"

    id = Column(Integer, primary_key=True)
    job_posting_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    total_score = Column(Numeric(5, 4, asdecimal=False), nullable=False)  # 0.0000 - 1.0000
    match_reasons = Column(JSON, nullable=False)  # {"skills": 0.7, "location": 0.9, ...}
    notification_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    job_posting = relationship("JobPosting")
    candidate = relationship("User")

    __table_args__ = (
        UniqueConstraint("job_posting_id", "candidate_id", name="uq_job_matches_job_candidate"),
        Index("ix_job_matches_candidate_score", "candidate_id", "total_score"),
        Index("ix_job_matches_job_score", "job_posting_id", "total_score"),
        Index("ix_job_matches_notification_sent", "notification_sent"),
    )

    @property
    def match_percentage(self) -> int:
        return score_percentage(self.total_score)

    @property
    def match_quality(self) -> str:
        return match_quality(self.total_score)


class Notification(Base):
    """In-app notification for a user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class SweepLock(Base):
    """Lease row held while a matching sweep is running."""

    __tablename__ = "sweep_locks"

    name = Column(String, primary_key=True)
    owner = Column(String, nullable=False)
    acquired_at = Column(DateTime, nullable=False, default=datetime.now)


def score_percentage(score: float) -> int:
    """Score as a whole percentage, halves rounded up (0.725 -> 73)."""
    return int(Decimal(str(score)).scaleb(2).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def match_quality(score: float) -> str:
    """Human-readable quality label for a total score."""
    if score >= 0.8:
        return "Excellent"
    if score >= 0.7:
        return "Very Good"
    if score >= 0.6:
        return "Good"
    if score >= 0.5:
        return "Fair"
    return "Poor"


def _create_engine(db_path: Path):
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = _create_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session_factory(db_path: Path) -> sessionmaker:
    """
    Get a session factory bound to one engine.

    Sweeps open one session per job, possibly from several threads, so
    they share an engine through the factory.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy sessionmaker
    """
    engine = _create_engine(db_path)
    return sessionmaker(bind=engine, expire_on_commit=False)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    return get_session_factory(db_path)()
