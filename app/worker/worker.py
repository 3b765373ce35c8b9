import time
from dataclasses import dataclass

from app.config.settings import Settings
from app.database.connection import Database
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


@dataclass
class WorkerStats:
    claimed: int = 0
    succeeded: int = 0
    failed: int = 0
    responses: int = 0

    def record(self, success: bool, forms_processed: int) -> None:
        self.claimed += 1
        if success:
            self.succeeded += 1
            self.responses += forms_processed
        else:
            self.failed += 1


class Worker:
    """Claims pending uploads one at a time and hands them to the JobRunner.

    An empty queue or an unreachable database both lead to a sleep of
    ``job_poll_interval_seconds`` before the next claim attempt.
    """

    def __init__(
        self,
        db: Database,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._db = db
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> WorkerStats:
        """Poll until interrupted, or until ``max_jobs`` uploads were claimed."""
        Log.info(f"Worker started, polling every {self._settings.job_poll_interval_seconds}s")
        stats = WorkerStats()
        try:
            while max_jobs is None or stats.claimed < max_jobs:
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No pending uploads, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                summary = self._job_runner.run(job)
                stats.record(summary.success, summary.forms_processed)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        Log.info(
            f"Worker stopped: {stats.succeeded} uploads completed, {stats.failed} failed, "
            f"{stats.responses} responses saved"
        )
        return stats

    def _try_claim_job(self) -> JobRecord | None:
        try:
            with self._db.connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Could not claim an upload, will retry: {exc}")
            return None
