from evidence_verifier.database.models import JobRecord
from evidence_verifier.database.repositories.job_repository import JobRepository
from evidence_verifier.logging.logger import Log
from evidence_verifier.processor.processor import Processor


class JobRunner:
    """Run one verification pass and contain its failure.

    Nothing raised while verifying a document escapes this class, so one
    failing document cannot affect the caller or other documents.
    Failed passes are not retried.
    """

    def __init__(self, processor: Processor, job_repo: JobRepository | None = None) -> None:
        self._processor = processor
        self._job_repo = job_repo

    def run_document(self, document_id: str, reevaluate: bool = False) -> str | None:
        """Verify a document. Returns the error message, or None on success."""
        try:
            self._processor.process(document_id, reevaluate=reevaluate)
        except Exception as exc:
            Log.exception(f"Verification of document {document_id} failed: {exc}")
            return str(exc) or type(exc).__name__
        Log.info(f"Verification of document {document_id} completed")
        return None

    def run(self, job: JobRecord) -> bool:
        """Execute a queued job and record its outcome on the job row.

        Returns True when the verification pass succeeded.
        """
        if self._job_repo is None:
            raise RuntimeError("JobRunner.run(job) requires a JobRepository")

        Log.info(f"Running job {job.id} for document {job.document_id}")
        error = self.run_document(job.document_id, reevaluate=job.reevaluate)
        try:
            if error is None:
                self._job_repo.mark_done(job.id)
            else:
                self._job_repo.mark_failed(job.id, error)
        except Exception as exc:
            Log.error(f"Could not record outcome of job {job.id}: {exc}")
        return error is None
