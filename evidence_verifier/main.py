from evidence_verifier.config.settings import Settings
from evidence_verifier.database.connection import close_pool, init_pool
from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.database.repositories.job_repository import JobRepository
from evidence_verifier.database.schema import create_schema
from evidence_verifier.logging.logger import Log
from evidence_verifier.processor.processor import build_processor
from evidence_verifier.storage.local_blob_store import LocalBlobStore
from evidence_verifier.worker.job_runner import JobRunner
from evidence_verifier.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        create_schema()
        blob_store = LocalBlobStore(settings.storage_root)
        processor = build_processor(settings, DocumentRepository(blob_store), blob_store)
        job_repo = JobRepository()
        job_runner = JobRunner(processor, job_repo)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
