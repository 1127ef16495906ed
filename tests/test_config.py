"""
Tests for environment-driven settings.
"""

import pytest
from pathlib import Path

from jobmatch.config import DEFAULT_DB_PATH, load_settings

ENV_VARS = (
    "JOBMATCH_DB_PATH",
    "JOBMATCH_LOG_LEVEL",
    "JOBMATCH_LOG_DIR",
    "JOBMATCH_SWEEP_INTERVAL_MINUTES",
    "JOBMATCH_CHUNK_SIZE",
    "JOBMATCH_MAX_WORKERS",
    "JOBMATCH_LOCK_TTL_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No JOBMATCH_* variables and no .env file in the working directory."""
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        # setenv first so teardown restores the original absence
        monkeypatch.setenv(name, "x")
        monkeypatch.delenv(name)
    return monkeypatch


class TestLoadSettings:
    """Test environment-driven settings."""

    def test_defaults(self, clean_env):
        settings = load_settings()

        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.log_level == "INFO"
        assert settings.sweep_interval_minutes == 60
        assert settings.chunk_size == 500
        assert settings.max_workers == 1
        assert settings.lock_ttl_seconds == 3600

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("JOBMATCH_DB_PATH", "/srv/matching.db")
        clean_env.setenv("JOBMATCH_LOG_LEVEL", "warning")
        clean_env.setenv("JOBMATCH_CHUNK_SIZE", "50")
        clean_env.setenv("JOBMATCH_MAX_WORKERS", "4")
        clean_env.setenv("JOBMATCH_LOG_TO_FILE", "false")

        settings = load_settings()

        assert settings.db_path == Path("/srv/matching.db")
        assert settings.log_level == "WARNING"
        assert settings.chunk_size == 50
        assert settings.max_workers == 4
        assert settings.log_to_file is False

    def test_explicit_db_path_wins(self, clean_env):
        clean_env.setenv("JOBMATCH_DB_PATH", "/srv/matching.db")
        assert load_settings(Path("local.db")).db_path == Path("local.db")

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("JOBMATCH_CHUNK_SIZE", "lots")
        with pytest.raises(ValueError, match="JOBMATCH_CHUNK_SIZE"):
            load_settings()

    def test_integer_below_minimum(self, clean_env):
        clean_env.setenv("JOBMATCH_MAX_WORKERS", "0")
        with pytest.raises(ValueError, match=">= 1"):
            load_settings()

    def test_invalid_log_level(self, clean_env):
        clean_env.setenv("JOBMATCH_LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError, match="log level"):
            load_settings()

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("JOBMATCH_CHUNK_SIZE=25\nJOBMATCH_SWEEP_INTERVAL_MINUTES=15\n")

        settings = load_settings()

        assert settings.chunk_size == 25
        assert settings.sweep_interval_minutes == 15

    def test_environment_beats_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("JOBMATCH_CHUNK_SIZE=25\n")
        clean_env.setenv("JOBMATCH_CHUNK_SIZE", "75")

        assert load_settings().chunk_size == 75
