from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.documents.models import Document, DocumentType, NewDocument
from evidence_verifier.intake.validator import UploadValidator
from evidence_verifier.logging.logger import Log
from evidence_verifier.scheduling.base import BaseScheduler
from evidence_verifier.storage.base import BaseBlobStore


class IntakeService:
    """Accepts uploads: validate -> store blob -> create record -> schedule.

    Returns as soon as the document row is committed; verification happens
    in the background.
    """

    def __init__(
        self,
        validator: UploadValidator,
        blob_store: BaseBlobStore,
        doc_repo: DocumentRepository,
        scheduler: BaseScheduler,
    ) -> None:
        self._validator = validator
        self._blob_store = blob_store
        self._doc_repo = doc_repo
        self._scheduler = scheduler

    def submit(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        document_type: str | DocumentType,
        report_id: str | None = None,
        candidate_id: str | None = None,
    ) -> Document:
        """Store a new document and queue its verification.

        Raises:
            ValidationError: if the upload breaks the intake policy. Nothing is written.
            StorageError: if the blob cannot be stored. No document row is created.
        """
        upload = self._validator.validate(
            file_bytes,
            file_name,
            content_type,
            document_type,
            report_id=report_id,
            candidate_id=candidate_id,
        )

        storage_key = self._blob_store.put(
            file_bytes,
            upload.extension,
            partition=upload.document_type.value,
        )
        try:
            document = self._doc_repo.create(
                NewDocument(
                    storage_key=storage_key,
                    original_file_name=upload.file_name,
                    content_type=upload.content_type,
                    size_bytes=upload.size_bytes,
                    document_type=upload.document_type,
                    report_id=upload.report_id,
                    candidate_id=upload.candidate_id,
                )
            )
        except Exception:
            self._discard_blob(storage_key)
            raise

        Log.info(
            f"Accepted document {document.id} ({upload.document_type.value}, "
            f"{upload.size_bytes} bytes)"
        )
        try:
            self._scheduler.schedule(document.id)
        except Exception as exc:
            Log.exception(f"Could not schedule verification of document {document.id}: {exc}")
        return document

    def _discard_blob(self, storage_key: str) -> None:
        try:
            self._blob_store.delete(storage_key)
        except Exception as exc:
            Log.warning(f"Could not remove orphaned blob {storage_key}: {exc}")
