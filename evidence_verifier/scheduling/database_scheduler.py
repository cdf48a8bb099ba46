from evidence_verifier.database.repositories.job_repository import JobRepository
from evidence_verifier.logging.logger import Log
from evidence_verifier.scheduling.base import BaseScheduler


class JobTableScheduler(BaseScheduler):
    """Queues passes as rows in verification_jobs for the worker process."""

    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def schedule(self, document_id: str, reevaluate: bool = False) -> None:
        job_id = self._job_repo.enqueue(document_id, reevaluate=reevaluate)
        Log.info(f"Queued job {job_id} for document {document_id}")
