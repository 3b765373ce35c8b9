import argparse
import json

from app.config.settings import Settings
from app.database.connection import Database
from app.database.models import TERMINAL_STATUSES
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.models import ProcessingSummary
from app.processor.processor import build_processor
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract survey responses from uploaded PDFs.")
    parser.add_argument("--job-id", help="process a single upload and print its summary")
    parser.add_argument(
        "--retry",
        action="store_true",
        help="reset the upload to processing before running it (requires --job-id)",
    )
    args = parser.parse_args(argv)
    if args.retry and not args.job_id:
        parser.error("--retry requires --job-id")
    return args


def run_single(job_id: str, retry: bool, job_repo: JobRepository, runner: JobRunner) -> ProcessingSummary:
    """Process one upload outside the poll loop."""
    try:
        if retry:
            job_repo.request_retry(job_id)
            Log.info(f"Retry requested for upload {job_id}")
        job = job_repo.find_by_id(job_id)
    except Exception as exc:
        Log.error(f"Cannot start upload {job_id}: {exc}")
        return ProcessingSummary.failure(str(exc))
    if job.status in TERMINAL_STATUSES and not retry:
        message = f"Upload {job_id} is already {job.status}; pass --retry to process it again"
        Log.error(message)
        return ProcessingSummary.failure(message)
    return runner.run(job)


def main(argv: list[str] | None = None) -> int:
    """Entry point: open pool -> build dependencies -> single job or worker loop."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info(f"Starting survey extraction worker (env={settings.app_env})")
    db = Database(settings)
    db.open()

    try:
        job_repo = JobRepository(db)
        job_runner = JobRunner(build_processor(settings, db))
        if args.job_id:
            summary = run_single(args.job_id, args.retry, job_repo, job_runner)
            print(json.dumps(summary.to_dict()))
            return 0 if summary.success else 1
        Worker(db, job_repo, job_runner, settings).run()
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
