"""
Periodic matching sweeps.

Runs the sweep on a fixed interval with the ``schedule`` library. One
process drives one scheduler; the sweep lease guards against overlap
with sweeps started elsewhere.
"""

import time
from typing import Optional

import schedule

from .logger import StructuredLogger, get_logger
from .pipelines.matching.orchestrator import MatchingOrchestrator


def sweep_job(orchestrator: MatchingOrchestrator, logger: StructuredLogger) -> None:
    summary = orchestrator.run_sweep()
    logger.info("Scheduled sweep finished", **summary.as_dict())


def build_scheduler(
    orchestrator: MatchingOrchestrator,
    interval_minutes: int = 60,
    logger: Optional[StructuredLogger] = None,
) -> schedule.Scheduler:
    """
    Create a scheduler with one sweep job registered.

    Args:
        orchestrator: Orchestrator whose sweep is run
        interval_minutes: Minutes between sweeps
        logger: Logger for sweep results

    Returns:
        schedule.Scheduler ready for run_pending()
    """
    if interval_minutes < 1:
        raise ValueError("interval_minutes must be >= 1")
    logger = logger or get_logger()
    scheduler = schedule.Scheduler()
    scheduler.every(interval_minutes).minutes.do(sweep_job, orchestrator, logger)
    logger.info("Scheduled matching sweep", interval_minutes=interval_minutes)
    return scheduler


def run_scheduler(
    orchestrator: MatchingOrchestrator,
    interval_minutes: int = 60,
    run_immediately: bool = True,
    poll_seconds: float = 30.0,
    logger: Optional[StructuredLogger] = None,
) -> None:
    """Block forever, running sweeps on schedule until interrupted."""
    logger = logger or get_logger()
    scheduler = build_scheduler(orchestrator, interval_minutes, logger)
    if run_immediately:
        scheduler.run_all()

    while True:
        try:
            scheduler.run_pending()
            time.sleep(poll_seconds)
        except KeyboardInterrupt:
            logger.info("Scheduler stopped")
            return
