"""
Tests for retry logic.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from jobmatch.retry import RetryError, backoff_delays, exponential_backoff, is_transient_error


def _locked():
    return OperationalError("INSERT INTO job_matches", {}, Exception("database is locked"))


@pytest.fixture
def no_sleep(monkeypatch):
    slept = []
    monkeypatch.setattr("jobmatch.retry.time.sleep", slept.append)
    return slept


class TestBackoffDelays:
    """Test the delay schedule."""

    def test_doubles(self):
        assert backoff_delays(3, 0.01, 60.0, 2.0) == [0.01, 0.02, 0.04]

    def test_capped(self):
        assert backoff_delays(5, 1.0, 2.0, 3.0) == [1.0, 2.0, 2.0, 2.0, 2.0]

    def test_no_retries(self):
        assert backoff_delays(0, 1.0, 60.0, 2.0) == []


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self, no_sleep):
        """A write that succeeds immediately is not repeated."""
        calls = []

        @exponential_backoff(max_retries=3, base_delay=0.1)
        def write():
            calls.append(1)
            return "written"

        assert write() == "written"
        assert len(calls) == 1
        assert no_sleep == []

    def test_lock_contention_then_success(self, no_sleep):
        calls = []

        @exponential_backoff(max_retries=3, base_delay=0.05, exceptions=(OperationalError,))
        def write():
            calls.append(1)
            if len(calls) < 3:
                raise _locked()
            return "written"

        assert write() == "written"
        assert len(calls) == 3
        assert no_sleep == [0.05, 0.1]

    def test_all_retries_exhausted(self, no_sleep):
        """RetryError is chained to the last failure."""
        calls = []

        @exponential_backoff(max_retries=2, base_delay=0.01, exceptions=(OperationalError,))
        def write():
            calls.append(1)
            raise _locked()

        with pytest.raises(RetryError, match="after 3 attempts") as exc_info:
            write()

        assert len(calls) == 3  # Initial + 2 retries
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_other_exception_types_propagate(self, no_sleep):
        calls = []

        @exponential_backoff(max_retries=3, base_delay=0.01, exceptions=(OperationalError,))
        def write():
            calls.append(1)
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(IntegrityError):
            write()

        assert len(calls) == 1

    def test_retry_if_rejects_permanent_errors(self, no_sleep):
        """A caught exception failing retry_if is re-raised as is."""
        calls = []

        @exponential_backoff(
            max_retries=3,
            base_delay=0,
            exceptions=(OperationalError,),
            retry_if=is_transient_error,
        )
        def write():
            calls.append(1)
            raise OperationalError("SELECT", {}, Exception("no such table: job_matches"))

        with pytest.raises(OperationalError):
            write()

        assert len(calls) == 1

    def test_on_retry_callback(self, no_sleep):
        seen = []

        @exponential_backoff(
            max_retries=2,
            base_delay=0.5,
            exceptions=(OperationalError,),
            on_retry=lambda attempt, exc, delay: seen.append((attempt, delay)),
        )
        def write():
            raise _locked()

        with pytest.raises(RetryError):
            write()

        assert seen == [(1, 0.5), (2, 1.0)]


class TestTransientErrorDetection:
    """Test transient error detection utilities."""

    def test_detects_lock_contention(self):
        assert is_transient_error(_locked())

    def test_detects_timeout_and_connection_errors(self):
        assert is_transient_error(ConnectionError("Connection timeout"))
        assert is_transient_error(Exception("Connection reset by peer"))

    def test_non_transient_errors(self):
        """Schema and constraint failures are permanent."""
        errors = [
            Exception("no such table: job_matches"),
            ValueError("Invalid data"),
            Exception("UNIQUE constraint failed: job_matches.job_posting_id"),
        ]
        for error in errors:
            assert not is_transient_error(error)
