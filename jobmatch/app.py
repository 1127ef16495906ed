import argparse
import json
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Settings, load_settings
from .database import init_database, score_percentage
from .errors import MatchingError
from .logger import get_logger
from .pipelines.matching.orchestrator import MatchingOrchestrator
from .scheduler import run_scheduler


def _orchestrator(args: argparse.Namespace, settings: Optional[Settings] = None) -> MatchingOrchestrator:
    settings = settings or load_settings(Path(args.db) if args.db else None)
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_file=settings.log_to_file)
    init_database(settings.db_path)
    return MatchingOrchestrator.from_settings(settings, logger=logger)


def cmd_init_db(args: argparse.Namespace) -> None:
    settings = load_settings(Path(args.db) if args.db else None)
    init_database(settings.db_path)
    print(f"Database ready: {settings.db_path}")


def cmd_sweep(args: argparse.Namespace) -> None:
    summary = _orchestrator(args).run_sweep()
    print(json.dumps(summary.as_dict(), indent=2))
    if not summary.success:
        raise SystemExit(1)


def cmd_candidates_for_job(args: argparse.Namespace) -> None:
    results = _orchestrator(args).find_candidates_for_job(args.job_id, requester_id=args.requester_id)
    if not results:
        print("No matching candidates.")
        return
    print(f"Found {len(results)} candidates for job {args.job_id}:\n")
    for r in results:
        print(f"Candidate: {r.candidate.id} {r.candidate.name}")
        print(f"  Score: {score_percentage(r.score)}%")
        print(f"  Breakdown: {json.dumps(r.breakdown.as_dict())}")


def cmd_recommend_jobs(args: argparse.Namespace) -> None:
    results = _orchestrator(args).recommend_jobs_for_candidate(args.candidate_id)
    if not results:
        print("No recommended jobs.")
        return
    print(f"Found {len(results)} jobs for candidate {args.candidate_id}:\n")
    for r in results:
        print(f"Job: {r.job.id} {r.job.title}")
        print(f"  Score: {score_percentage(r.score)}%")
        print(f"  Breakdown: {json.dumps(r.breakdown.as_dict())}")


def cmd_matches_for_candidate(args: argparse.Namespace) -> None:
    matches = _orchestrator(args).find_jobs_for_candidate(args.candidate_id, args.min_score)
    if not matches:
        print("No matches.")
        return
    for m in matches:
        print(f"Job: {m.job_posting_id} {m.job_posting.title}")
        print(f"  Score: {m.match_percentage}% ({m.match_quality})")


def cmd_matches_for_job(args: argparse.Namespace) -> None:
    matches = _orchestrator(args).find_matches_for_job(args.job_id, args.requester_id, args.min_score)
    if not matches:
        print("No matches.")
        return
    for m in matches:
        print(f"Candidate: {m.candidate_id} {m.candidate.name}")
        print(f"  Score: {m.match_percentage}% ({m.match_quality})")


def cmd_schedule(args: argparse.Namespace) -> None:
    settings = load_settings(Path(args.db) if args.db else None)
    orchestrator = _orchestrator(args, settings)
    run_scheduler(orchestrator, interval_minutes=args.every or settings.sweep_interval_minutes)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobmatch", description="Job board matching engine")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: $JOBMATCH_DB_PATH or data/jobmatch.db)")

    subparsers = parser.add_subparsers(dest="command")

    ini = subparsers.add_parser("init-db", help="Create database tables")
    ini.set_defaults(func=cmd_init_db)

    swp = subparsers.add_parser("sweep", help="Run one matching sweep over all active jobs")
    swp.set_defaults(func=cmd_sweep)

    cfj = subparsers.add_parser("candidates-for-job", help="Score eligible candidates for a job (not persisted)")
    cfj.add_argument("--job-id", type=int, required=True, help="Job posting id")
    cfj.add_argument("--requester-id", type=int, help="Employer id to check job ownership")
    cfj.set_defaults(func=cmd_candidates_for_job)

    rec = subparsers.add_parser("recommend-jobs", help="Score active jobs for a candidate (not persisted)")
    rec.add_argument("--candidate-id", type=int, required=True, help="Candidate user id")
    rec.set_defaults(func=cmd_recommend_jobs)

    mfc = subparsers.add_parser("matches-for-candidate", help="List stored matches for a candidate")
    mfc.add_argument("--candidate-id", type=int, required=True, help="Candidate user id")
    mfc.add_argument("--min-score", type=int, default=70, help="Minimum score percent (default: 70)")
    mfc.set_defaults(func=cmd_matches_for_candidate)

    mfj = subparsers.add_parser("matches-for-job", help="List stored matches for a job")
    mfj.add_argument("--job-id", type=int, required=True, help="Job posting id")
    mfj.add_argument("--requester-id", type=int, required=True, help="Employer or admin user id")
    mfj.add_argument("--min-score", type=int, default=70, help="Minimum score percent (default: 70)")
    mfj.set_defaults(func=cmd_matches_for_job)

    sch = subparsers.add_parser("schedule", help="Run sweeps periodically until interrupted")
    sch.add_argument("--every", type=int, help="Minutes between sweeps (default: $JOBMATCH_SWEEP_INTERVAL_MINUTES or 60)")
    sch.set_defaults(func=cmd_schedule)

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except MatchingError as e:
            raise SystemExit(f"Error: {e}")
        return

    parser.print_help()


if __name__ == "__main__":
    main()
