"""
Exception taxonomy for the matching engine.

Scorers and the aggregator never raise; only I/O and caller-facing
query operations do.
"""

from typing import List, Optional


class MatchingError(Exception):
    """Base class for all matching engine errors."""
    pass


class AuthorizationError(MatchingError):
    """Raised when a caller is not entitled to view a set of matches."""
    pass


class NotEligibleError(MatchingError):
    """Raised when an on-demand query targets an ineligible candidate."""
    pass


class ValidationError(MatchingError):
    """Raised when on-demand query inputs are malformed."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TransientStorageError(MatchingError):
    """Raised when a persistence operation fails during a sweep."""

    def __init__(self, message: str, job_id: Optional[int] = None, candidate_id: Optional[int] = None):
        super().__init__(message)
        self.job_id = job_id
        self.candidate_id = candidate_id
