"""
Structured logging system for the matching engine.

Messages go to the console and a dated log file, with keyword context
appended as JSON. The logger also keeps sweep counters so a long-running
scheduler can report how matching is going.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

COUNTERS = (
    "sweeps_started",
    "sweeps_completed",
    "sweeps_failed",
    "pairs_scored",
    "pairs_skipped",
    "matches_created",
    "notifications_sent",
)


def _empty_metrics() -> dict:
    metrics = {name: 0 for name in COUNTERS}
    metrics["errors_by_type"] = {}
    return metrics


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring matching sweeps.
    """

    def __init__(
        self,
        name: str = "jobmatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        numeric_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(numeric_level)
        self.logger.handlers.clear()

        # Worker threads record errors while the sweep thread records tallies.
        self._metrics_lock = threading.Lock()
        self.metrics = _empty_metrics()

        if enable_console:
            self.logger.addHandler(_handler(logging.StreamHandler(sys.stdout), numeric_level, CONSOLE_FORMAT))

        if enable_file:
            log_dir = log_dir or Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"jobmatch_{datetime.now().strftime('%Y%m%d')}.log"
            # Files always get everything down to DEBUG.
            self.logger.addHandler(_handler(logging.FileHandler(log_file, encoding='utf-8'), logging.DEBUG, FILE_FORMAT))

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def _increment(self, counter: str, count: int = 1):
        with self._metrics_lock:
            self.metrics[counter] += count

    def record_sweep_started(self):
        self._increment("sweeps_started")

    def record_sweep_finished(self, success: bool):
        self._increment("sweeps_completed" if success else "sweeps_failed")

    def record_pair_scored(self, count: int = 1):
        self._increment("pairs_scored", count)

    def record_pair_skipped(self, count: int = 1):
        self._increment("pairs_skipped", count)

    def record_match_created(self, count: int = 1):
        self._increment("matches_created", count)

    def record_notification_sent(self, count: int = 1):
        self._increment("notifications_sent", count)

    def record_error(self, error_type: str):
        """Record a failure by exception type."""
        with self._metrics_lock:
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Snapshot of the counters plus the share of scored pairs that became matches."""
        with self._metrics_lock:
            snapshot = dict(self.metrics)
            snapshot["errors_by_type"] = dict(self.metrics["errors_by_type"])

        scored = snapshot["pairs_scored"]
        snapshot["admission_rate"] = round(snapshot["matches_created"] / scored, 3) if scored else 0.0
        return snapshot

    def reset_metrics(self):
        with self._metrics_lock:
            self.metrics = _empty_metrics()

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Matching Session Metrics ===")
        self.info(
            f"Sweeps: {metrics['sweeps_completed']} completed, "
            f"{metrics['sweeps_failed']} failed of {metrics['sweeps_started']}"
        )
        self.info(f"Pairs: {metrics['pairs_scored']} scored, {metrics['pairs_skipped']} skipped")
        self.info(
            f"Matches: {metrics['matches_created']} created "
            f"({metrics['admission_rate'] * 100:.1f}% of scored pairs)"
        )
        self.info(f"Notifications: {metrics['notifications_sent']} sent")

        for error_type, count in metrics["errors_by_type"].items():
            self.info(f"  {error_type}: {count}")


def _env_enables_file() -> bool:
    return os.getenv("JOBMATCH_LOG_TO_FILE", "1").strip().lower() not in ("0", "false", "no", "off")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobmatch",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level, log directory and file output default to JOBMATCH_LOG_LEVEL,
    JOBMATCH_LOG_DIR and JOBMATCH_LOG_TO_FILE.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        level = level or os.getenv("JOBMATCH_LOG_LEVEL") or "INFO"
        if "log_dir" not in kwargs and os.getenv("JOBMATCH_LOG_DIR"):
            kwargs["log_dir"] = Path(os.environ["JOBMATCH_LOG_DIR"])
        kwargs.setdefault("enable_file", _env_enables_file())
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
