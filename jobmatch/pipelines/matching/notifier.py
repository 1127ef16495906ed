"""
Match Notification Dispatch.

Responsibilities:
- Tell a candidate about a new match, at most once per match.
- Record the notification and flag the match in one transaction.

Non-Responsibilities:
- No scoring.
- No decision about which matches deserve a notification beyond the
  admission floor.

Invariant:
``notification_sent`` moves from False to True exactly once.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ...config import MatchingConfig
from ...database import NOTIFICATION_JOB_MATCH, JobMatch
from ...errors import TransientStorageError
from ...logger import StructuredLogger, get_logger
from ...storage.repositories import matches as match_repo
from ...storage.repositories import notifications as notification_repo

NOTIFICATION_TITLE = "New Job Match Found!"


def build_message(percentage: int, job_title: str) -> str:
    return f"We found a {percentage}% match for '{job_title}'. Check it out!"


class NotificationDispatcher:
    """Sends job-match notifications through the notification sink."""

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config or MatchingConfig()
        self.logger = logger or get_logger()

    def send_notification(self, session, match: JobMatch, job_title: Optional[str] = None) -> bool:
        """
        Notify the candidate of ``match`` unless already notified.

        Args:
            session: SQLAlchemy session that owns ``match``
            match: Persisted match
            job_title: Title to embed; loaded from the match's job if omitted

        Returns:
            True if a notification was created by this call

        Raises:
            TransientStorageError: If the notification or flag could not be written
        """
        if match.notification_sent:
            return False
        if match.total_score < self.config.admission_threshold:
            return False

        if job_title is None:
            job_title = match.job_posting.title if match.job_posting is not None else ""

        message = build_message(match.match_percentage, job_title)
        try:
            notification_repo.create(
                session,
                user_id=match.candidate_id,
                type=NOTIFICATION_JOB_MATCH,
                title=NOTIFICATION_TITLE,
                message=message,
            )
            match_repo.mark_notification_sent(session, match)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise TransientStorageError(
                f"Failed to send match notification: {e}",
                job_id=match.job_posting_id,
                candidate_id=match.candidate_id,
            ) from e

        self.logger.debug(
            "Match notification sent",
            match_id=match.id,
            candidate_id=match.candidate_id,
            job_id=match.job_posting_id,
            score=match.total_score,
        )
        return True
