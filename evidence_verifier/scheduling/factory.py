from evidence_verifier.config.settings import Settings
from evidence_verifier.database.repositories.job_repository import JobRepository
from evidence_verifier.scheduling.base import BaseScheduler
from evidence_verifier.scheduling.database_scheduler import JobTableScheduler
from evidence_verifier.scheduling.thread_scheduler import ThreadPoolScheduler
from evidence_verifier.worker.job_runner import JobRunner


class SchedulerFactory:
    """Creates the scheduler backend named in settings."""

    BACKENDS = ("thread", "database")

    @classmethod
    def create(cls, settings: Settings, job_runner: JobRunner) -> BaseScheduler:
        backend = settings.scheduler_backend.lower()
        if backend == "thread":
            return ThreadPoolScheduler(job_runner, settings.scheduler_max_workers)
        if backend == "database":
            return JobTableScheduler(JobRepository())
        raise ValueError(
            f"Unknown scheduler backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
