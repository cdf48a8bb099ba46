import time
from dataclasses import dataclass

from evidence_verifier.config.settings import Settings
from evidence_verifier.database.connection import get_connection
from evidence_verifier.database.models import JobRecord
from evidence_verifier.database.repositories.job_repository import JobRepository
from evidence_verifier.logging.logger import Log
from evidence_verifier.worker.job_runner import JobRunner

# Poll interval multiplier cap while the database keeps failing
MAX_BACKOFF_FACTOR = 8


@dataclass
class WorkerStats:
    completed_passes: int = 0
    failed_passes: int = 0

    @property
    def jobs_done(self) -> int:
        return self.completed_passes + self.failed_passes


class Worker:
    """Drains the verification job table: claim -> verify -> record, or sleep.

    Several workers can poll the same table; SKIP LOCKED hands each job to
    exactly one of them. When claiming fails the wait between polls doubles,
    up to MAX_BACKOFF_FACTOR times the configured interval.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> WorkerStats:
        """Poll until interrupted, or until max_jobs jobs have been handled."""
        Log.info("Verification worker started, polling for jobs")
        stats = WorkerStats()
        claim_failures = 0
        try:
            while max_jobs is None or stats.jobs_done < max_jobs:
                try:
                    job = self._claim_job()
                except Exception as exc:
                    claim_failures += 1
                    Log.warning(f"Could not claim a job (attempt {claim_failures}): {exc}")
                    self._sleep(claim_failures)
                    continue

                claim_failures = 0
                if job is None:
                    Log.debug("No verification jobs queued, sleeping")
                    self._sleep(0)
                    continue

                self._dispatch(job, stats)
        except KeyboardInterrupt:
            Log.info("Verification worker shutting down gracefully")

        Log.info(
            f"Verification worker stopped: {stats.completed_passes} passes completed, "
            f"{stats.failed_passes} failed"
        )
        return stats

    def _claim_job(self) -> JobRecord | None:
        with get_connection() as conn:
            return self._job_repo.claim_next_job(conn)

    def _dispatch(self, job: JobRecord, stats: WorkerStats) -> None:
        kind = "re-evaluation" if job.reevaluate else "first pass"
        Log.info(f"Claimed job {job.id}: {kind} of document {job.document_id}")
        if self._job_runner.run(job):
            stats.completed_passes += 1
        else:
            stats.failed_passes += 1

    def _sleep(self, claim_failures: int) -> None:
        factor = min(2**claim_failures, MAX_BACKOFF_FACTOR) if claim_failures else 1
        time.sleep(self._settings.job_poll_interval_seconds * factor)
