"""
Matching Orchestrator.

Responsibilities:
- Run the periodic sweep over every eligible (job, candidate) pair.
- Drive scoring, match persistence and notifications.
- Serve on-demand match queries for one job or one candidate.
- Report a summary of each sweep.

Non-Responsibilities:
- No dimension scoring (features.py).
- No SQL (storage/repositories).

Invariant:
A sweep is safely restartable: existing matches are never rescored and
notified matches are never notified again.
"""

import os
import socket
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Callable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ...config import MatchingConfig, Settings
from ...database import ROLE_ADMIN, ROLE_CANDIDATE, JobMatch, get_session_factory
from ...errors import AuthorizationError, MatchingError, NotEligibleError, TransientStorageError, ValidationError
from ...logger import StructuredLogger, get_logger
from ...models import Candidate, CandidateMatch, Job, JobRecommendation, MatchScore, SweepSummary
from ...retry import RetryError, exponential_backoff, is_transient_error
from ...schema import validate_query_strict
from ...storage.repositories import applications as application_repo
from ...storage.repositories import candidates as candidate_repo
from ...storage.repositories import jobs as job_repo
from ...storage.repositories import matches as match_repo
from ...storage.repositories import locks as lock_repo
from .candidate_selector import is_candidate_eligible, is_job_eligible, should_score_pair
from .notifier import NotificationDispatcher
from .scoring import MatchAggregator

LOCK_BUSY_MESSAGE = "A matching sweep is already running"
LOCK_LOST_MESSAGE = "Matching sweep lease was taken over"


@dataclass
class _Tally:
    """Counts for one job's pass over a page of candidates."""

    scored: int = 0
    skipped: int = 0
    created: int = 0
    notified: int = 0
    errors: int = 0

    def add_to(self, summary: SweepSummary) -> None:
        summary.pairs_scored += self.scored
        summary.pairs_skipped += self.skipped
        summary.matches_created += self.created
        summary.notifications_sent += self.notified
        summary.pair_errors += self.errors


class MatchingOrchestrator:
    """Coordinates eligibility, scoring, persistence and notification."""

    def __init__(
        self,
        session_factory: Callable,
        config: Optional[MatchingConfig] = None,
        chunk_size: int = 500,
        max_workers: int = 1,
        lock_ttl_seconds: int = 3600,
        logger: Optional[StructuredLogger] = None,
        max_retries: int = 3,
        retry_base_delay: float = 0.05,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.session_factory = session_factory
        self.config = config or MatchingConfig()
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.lock_ttl_seconds = lock_ttl_seconds
        self.logger = logger or get_logger()
        self.aggregator = MatchAggregator(self.config)
        self.dispatcher = NotificationDispatcher(self.config, self.logger)

        self._persist_match = exponential_backoff(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            exceptions=(OperationalError,),
            retry_if=is_transient_error,
            on_retry=self._log_retry,
        )(self._create_match)

    @classmethod
    def from_settings(cls, settings: Settings, logger: Optional[StructuredLogger] = None) -> "MatchingOrchestrator":
        return cls(
            session_factory=get_session_factory(settings.db_path),
            config=settings.matching,
            chunk_size=settings.chunk_size,
            max_workers=settings.max_workers,
            lock_ttl_seconds=settings.lock_ttl_seconds,
            logger=logger,
        )

    # Sweep

    def run_sweep(self) -> SweepSummary:
        """
        Match every active job against every eligible candidate.

        Never raises: run-level failures are logged and reported through
        ``SweepSummary.success`` with the counts reached so far.
        """
        start = time.monotonic()
        summary = SweepSummary()
        owner = f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"
        self.logger.record_sweep_started()
        self.logger.info("Job matching started", owner=owner, chunk_size=self.chunk_size, workers=self.max_workers)

        try:
            with lock_repo.held_lock(self.session_factory, owner, self.lock_ttl_seconds) as acquired:
                if acquired:
                    self._sweep(summary, owner)
                else:
                    summary.success = False
                    summary.error = LOCK_BUSY_MESSAGE
                    self.logger.warning("Job matching skipped", reason=LOCK_BUSY_MESSAGE)
        except Exception as e:
            summary.success = False
            summary.error = str(e)
            self.logger.record_error(type(e).__name__)
            self.logger.error(
                "Job matching failed",
                error=str(e),
                error_type=type(e).__name__,
                matches_created=summary.matches_created,
                notifications_sent=summary.notifications_sent,
            )

        summary.duration_seconds = round(time.monotonic() - start, 2)
        self.logger.record_sweep_finished(summary.success)
        if summary.success:
            self.logger.info("Job matching completed", **summary.as_dict())
        return summary

    def _sweep(self, summary: SweepSummary, owner: str) -> None:
        today = date.today()
        session = self.session_factory()
        try:
            for job_page in job_repo.iter_active_jobs(session, self.chunk_size, today):
                # Each job page restarts the lease TTL
                if not lock_repo.renew_lock(session, owner):
                    raise MatchingError(LOCK_LOST_MESSAGE)
                jobs = [j for j in job_page if is_job_eligible(j, today)]
                if not jobs:
                    continue
                for candidate_page in candidate_repo.iter_eligible_candidates(session, self.chunk_size):
                    candidates = [c for c in candidate_page if is_candidate_eligible(c)]
                    if not candidates:
                        continue
                    applied = application_repo.applied_pairs(
                        session,
                        job_ids=[j.id for j in jobs],
                        candidate_ids=[c.id for c in candidates],
                    )
                    self.logger.debug(
                        "Matching page",
                        jobs=len(jobs),
                        candidates=len(candidates),
                        applied_pairs=len(applied),
                    )
                    for tally in self._map_jobs(jobs, candidates, applied):
                        tally.add_to(summary)
                        self._record_tally(tally)
        finally:
            session.close()

    def _map_jobs(
        self,
        jobs: Sequence[Job],
        candidates: Sequence[Candidate],
        applied: AbstractSet[Tuple[int, int]],
    ) -> List[_Tally]:
        if self.max_workers == 1 or len(jobs) == 1:
            return [self._process_job(job, candidates, applied) for job in jobs]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda job: self._process_job(job, candidates, applied), jobs))

    def _process_job(
        self,
        job: Job,
        candidates: Sequence[Candidate],
        applied: AbstractSet[Tuple[int, int]],
    ) -> _Tally:
        tally = _Tally()
        session = self.session_factory()
        try:
            existing = match_repo.matches_for_job_map(session, job.id)
            for candidate in candidates:
                if not should_score_pair(job, candidate, applied):
                    tally.skipped += 1
                    continue

                match = existing.get(candidate.id)
                if match is not None:
                    # Already matched: never rescored, but a notification lost
                    # to an earlier crash is retried.
                    tally.skipped += 1
                    self._notify_if_due(session, match, job, tally)
                    continue

                score = self.aggregator.score(job, candidate)
                tally.scored += 1
                if not self.aggregator.is_admissible(score.total):
                    continue

                try:
                    match, created = self._persist(session, job, candidate, score)
                except TransientStorageError as e:
                    tally.errors += 1
                    self.logger.record_error(type(e.__cause__ or e).__name__)
                    self.logger.error(
                        "Failed to persist match",
                        job_id=job.id,
                        candidate_id=candidate.id,
                        score=score.total,
                        error=str(e),
                    )
                    continue

                if created:
                    tally.created += 1
                self._notify_if_due(session, match, job, tally)
        finally:
            session.close()
        return tally

    def _create_match(self, session, job: Job, candidate: Candidate, score: MatchScore) -> Tuple[JobMatch, bool]:
        return match_repo.create_match(session, job.id, candidate.id, score.total, score.breakdown)

    def _persist(self, session, job: Job, candidate: Candidate, score: MatchScore) -> Tuple[JobMatch, bool]:
        try:
            return self._persist_match(session, job, candidate, score)
        except (SQLAlchemyError, RetryError) as e:
            session.rollback()
            raise TransientStorageError(
                f"Could not persist match: {e}",
                job_id=job.id,
                candidate_id=candidate.id,
            ) from e

    def _notify_if_due(self, session, match: JobMatch, job: Job, tally: _Tally) -> None:
        if match.notification_sent or not self.aggregator.is_notifiable(match.total_score):
            return
        try:
            if self.dispatcher.send_notification(session, match, job_title=job.title):
                tally.notified += 1
        except TransientStorageError as e:
            tally.errors += 1
            self.logger.record_error(type(e.__cause__ or e).__name__)
            self.logger.error(
                "Failed to send match notification",
                match_id=match.id,
                job_id=job.id,
                candidate_id=match.candidate_id,
                error=str(e),
            )

    def _record_tally(self, tally: _Tally) -> None:
        self.logger.record_pair_scored(tally.scored)
        self.logger.record_pair_skipped(tally.skipped)
        self.logger.record_match_created(tally.created)
        self.logger.record_notification_sent(tally.notified)

    def _log_retry(self, attempt: int, exception: Exception, delay: float) -> None:
        self.logger.warning("Retrying match write", attempt=attempt, delay=delay, error=str(exception))

    # On-demand queries

    def find_candidates_for_job(self, job_id: int, requester_id: Optional[int] = None) -> List[CandidateMatch]:
        """
        Score one job against all eligible candidates without persisting.

        Returns:
            Admissible candidates, best score first
        """
        query = {"job_id": job_id}
        if requester_id is not None:
            query["requester_id"] = requester_id
        validate_query_strict(**query)

        results: List[CandidateMatch] = []
        with self.session_factory() as session:
            job = job_repo.get_job(session, job_id)
            if job is None:
                raise ValidationError([f"Job {job_id} does not exist"])
            if requester_id is not None:
                self._authorize_job_access(session, job, requester_id)

            applied = application_repo.applied_pairs(session, job_ids=[job.id])
            for page in candidate_repo.iter_eligible_candidates(session, self.chunk_size):
                for candidate in page:
                    if not is_candidate_eligible(candidate) or not should_score_pair(job, candidate, applied):
                        continue
                    score = self.aggregator.score(job, candidate)
                    if self.aggregator.is_admissible(score.total):
                        results.append(CandidateMatch(candidate, score.total, score.breakdown))

        results.sort(key=lambda m: m.score, reverse=True)
        return results

    def recommend_jobs_for_candidate(self, candidate_id: int) -> List[JobRecommendation]:
        """
        Score one candidate against every active job not yet applied to.

        Raises:
            ValidationError: Unknown candidate id
            NotEligibleError: Candidate inactive, not a candidate, or without profile
        """
        validate_query_strict(candidate_id=candidate_id)
        today = date.today()

        results: List[JobRecommendation] = []
        with self.session_factory() as session:
            candidate = candidate_repo.get_candidate(session, candidate_id)
            if candidate is None:
                raise ValidationError([f"Candidate {candidate_id} does not exist"])
            if not is_candidate_eligible(candidate):
                raise NotEligibleError(f"Candidate {candidate_id} is not eligible for matching")

            applied = application_repo.applied_pairs(session, candidate_ids=[candidate.id])
            for page in job_repo.iter_active_jobs(session, self.chunk_size, today):
                for job in page:
                    if not is_job_eligible(job, today) or not should_score_pair(job, candidate, applied):
                        continue
                    score = self.aggregator.score(job, candidate)
                    if self.aggregator.is_admissible(score.total):
                        results.append(JobRecommendation(job, score.total, score.breakdown))

        results.sort(key=lambda r: r.score, reverse=True)
        return results

    def find_jobs_for_candidate(self, candidate_id: int, min_score_percent: float = 70) -> List[JobMatch]:
        """Persisted matches of a candidate at or above ``min_score_percent``."""
        validate_query_strict(candidate_id=candidate_id, min_score_percent=min_score_percent)
        with self.session_factory() as session:
            user = candidate_repo.get_user(session, candidate_id)
            if user is None:
                raise ValidationError([f"Candidate {candidate_id} does not exist"])
            if user.role != ROLE_CANDIDATE:
                raise AuthorizationError("Only candidates can view job matches")
            return match_repo.matches_for_candidate(session, candidate_id, min_score_percent / 100)

    def find_matches_for_job(self, job_id: int, requester_id: int, min_score_percent: float = 70) -> List[JobMatch]:
        """Persisted matches of a job; the requester must own it or be an admin."""
        validate_query_strict(job_id=job_id, requester_id=requester_id, min_score_percent=min_score_percent)
        with self.session_factory() as session:
            job = job_repo.get_job(session, job_id)
            if job is None:
                raise ValidationError([f"Job {job_id} does not exist"])
            self._authorize_job_access(session, job, requester_id)
            return match_repo.matches_for_job(session, job_id, min_score_percent / 100)

    def _authorize_job_access(self, session, job: Job, requester_id: int) -> None:
        user = candidate_repo.get_user(session, requester_id)
        if user is None or (job.employer_id != user.id and user.role != ROLE_ADMIN):
            raise AuthorizationError("Unauthorized to view job matches")
