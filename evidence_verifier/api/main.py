from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from evidence_verifier.api.app_factory import create_app
from evidence_verifier.config.settings import Settings
from evidence_verifier.database.connection import close_pool, init_pool
from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.database.schema import create_schema
from evidence_verifier.intake.service import IntakeService
from evidence_verifier.intake.validator import UploadValidator
from evidence_verifier.logging.logger import Log
from evidence_verifier.processor.processor import build_processor
from evidence_verifier.review.service import ReviewService
from evidence_verifier.scheduling.factory import SchedulerFactory
from evidence_verifier.storage.local_blob_store import LocalBlobStore
from evidence_verifier.worker.job_runner import JobRunner


def build_app(settings: Settings) -> FastAPI:
    """Wire services from settings. The pool opens and closes with the app."""
    Log.configure(settings.log_level)

    blob_store = LocalBlobStore(settings.storage_root)
    doc_repo = DocumentRepository(blob_store)
    processor = build_processor(settings, doc_repo, blob_store)
    scheduler = SchedulerFactory.create(settings, JobRunner(processor))

    intake = IntakeService(
        UploadValidator(settings.max_upload_bytes),
        blob_store,
        doc_repo,
        scheduler,
    )
    review = ReviewService(doc_repo, scheduler)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        init_pool(settings)
        create_schema()
        Log.info(f"API started with '{settings.scheduler_backend}' scheduler")
        try:
            yield
        finally:
            scheduler.shutdown(wait=True)
            close_pool()

    return create_app(intake=intake, review=review, lifespan=lifespan)


app = build_app(Settings())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
