from concurrent.futures import ThreadPoolExecutor

from evidence_verifier.logging.logger import Log
from evidence_verifier.scheduling.base import BaseScheduler
from evidence_verifier.worker.job_runner import JobRunner


class ThreadPoolScheduler(BaseScheduler):
    """Runs verification passes on a thread pool inside the current process.

    Passes are not durable: a pass queued when the process stops is lost and
    its document stays Pending.
    """

    def __init__(self, job_runner: JobRunner, max_workers: int) -> None:
        self._job_runner = job_runner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="verification",
        )

    def schedule(self, document_id: str, reevaluate: bool = False) -> None:
        self._executor.submit(self._job_runner.run_document, document_id, reevaluate)
        Log.info(f"Scheduled verification of document {document_id}")

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
