"""
Configuration for the matching engine.

Scoring weights and thresholds live in explicit, immutable records that are
passed into the aggregator. Runtime settings (database location, paging,
scheduling) are read from environment variables, optionally seeded from a
``.env`` file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .env import load_env

DEFAULT_DB_PATH = Path("data") / "jobmatch.db"
DEFAULT_LOG_DIR = Path("logs")

WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class MatchWeights:
    """Weight of each dimension in the total score. Must sum to 1.0."""

    skills: float = 0.4
    location: float = 0.3
    salary: float = 0.2
    experience: float = 0.1

    def __post_init__(self):
        for name, value in self.as_dict().items():
            if value < 0:
                raise ValueError(f"Weight '{name}' must be >= 0, got {value}")
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Weights must sum to 1.0, got {total:.4f}")

    def as_dict(self) -> Dict[str, float]:
        return {
            "skills": self.skills,
            "location": self.location,
            "salary": self.salary,
            "experience": self.experience,
        }


@dataclass(frozen=True)
class MatchingConfig:
    """Weights and thresholds used by the scoring pipeline."""

    weights: MatchWeights = field(default_factory=MatchWeights)
    admission_threshold: float = 0.5
    notification_threshold: float = 0.7

    def __post_init__(self):
        for name in ("admission_threshold", "notification_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"'{name}' must be within [0, 1], got {value}")
        if self.notification_threshold < self.admission_threshold:
            raise ValueError("'notification_threshold' must be >= 'admission_threshold'")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for sweeps and the scheduler."""

    db_path: Path = DEFAULT_DB_PATH
    log_level: str = "INFO"
    log_dir: Path = DEFAULT_LOG_DIR
    log_to_file: bool = True
    sweep_interval_minutes: int = 60
    chunk_size: int = 500
    max_workers: int = 1
    lock_ttl_seconds: int = 3600
    matching: MatchingConfig = field(default_factory=MatchingConfig)


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"Environment variable {name} must be >= {minimum}, got {value}")
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def load_settings(db_path: Optional[Path] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        db_path: Explicit database path, overrides JOBMATCH_DB_PATH

    Returns:
        Settings populated from environment variables and defaults
    """
    load_env()

    if db_path is None:
        db_path = Path(os.getenv("JOBMATCH_DB_PATH") or DEFAULT_DB_PATH)

    log_level = (os.getenv("JOBMATCH_LOG_LEVEL") or "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Unsupported log level: {log_level}")

    return Settings(
        db_path=db_path,
        log_level=log_level,
        log_dir=Path(os.getenv("JOBMATCH_LOG_DIR") or DEFAULT_LOG_DIR),
        log_to_file=_bool_env("JOBMATCH_LOG_TO_FILE", True),
        sweep_interval_minutes=_int_env("JOBMATCH_SWEEP_INTERVAL_MINUTES", 60),
        chunk_size=_int_env("JOBMATCH_CHUNK_SIZE", 500),
        max_workers=_int_env("JOBMATCH_MAX_WORKERS", 1),
        lock_ttl_seconds=_int_env("JOBMATCH_LOCK_TTL_SECONDS", 3600),
    )
