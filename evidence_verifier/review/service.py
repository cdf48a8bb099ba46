from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.documents.models import DeleteOutcome, Document, VerificationStatus
from evidence_verifier.logging.logger import Log
from evidence_verifier.scheduling.base import BaseScheduler


class ReviewService:
    """Read access to documents plus the reviewer's manual controls."""

    def __init__(self, doc_repo: DocumentRepository, scheduler: BaseScheduler) -> None:
        self._doc_repo = doc_repo
        self._scheduler = scheduler

    def get_document(self, document_id: str) -> Document | None:
        return self._doc_repo.find_by_id(document_id)

    def list_report_documents(self, report_id: str) -> list[Document]:
        return self._doc_repo.list_by_report(report_id)

    def list_candidate_documents(self, candidate_id: str) -> list[Document]:
        return self._doc_repo.list_by_candidate(candidate_id)

    def review_queue(self) -> list[Document]:
        """Documents still waiting for a decision, oldest first."""
        return self._doc_repo.list_pending_or_under_review()

    def update_verification_status(
        self,
        document_id: str,
        status: str | VerificationStatus,
        comment: str | None = None,
    ) -> Document | None:
        """Set a status by hand, bypassing the engine.

        Any of the five statuses is accepted. A comment replaces the previous
        analysis summary. Repeating the same call leaves the same state.

        Raises:
            ValueError: if status is not a known verification status.
        """
        new_status = VerificationStatus(status)
        document = self._doc_repo.update_status(document_id, new_status, comment=comment)
        if document is not None:
            Log.info(f"Reviewer set document {document_id} to {new_status.value}")
        return document

    def reevaluate(self, document_id: str) -> bool:
        """Queue a new verification pass that overwrites the current verdict.

        Returns False if the document does not exist.
        """
        if self._doc_repo.find_by_id(document_id) is None:
            return False
        self._scheduler.schedule(document_id, reevaluate=True)
        return True

    def delete_document(self, document_id: str) -> DeleteOutcome:
        return self._doc_repo.delete(document_id)
