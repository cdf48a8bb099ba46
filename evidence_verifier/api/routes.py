from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from evidence_verifier.api.schemas import (
    DeleteResponse,
    DocumentResponse,
    VerificationUpdateRequest,
)
from evidence_verifier.intake.exceptions import ValidationError
from evidence_verifier.intake.service import IntakeService
from evidence_verifier.logging.logger import Log
from evidence_verifier.review.service import ReviewService
from evidence_verifier.storage.exceptions import StorageError, StorageFullError


def create_documents_router(*, intake: IntakeService, review: ReviewService) -> APIRouter:
    router = APIRouter()

    @router.post("/documents", status_code=202, response_model=DocumentResponse)
    async def submit_document(
        file: UploadFile = File(...),
        document_type: str = Form(...),
        report_id: str | None = Form(None),
        candidate_id: str | None = Form(None),
    ) -> DocumentResponse:
        blob = await file.read()
        try:
            document = await run_in_threadpool(
                intake.submit,
                blob,
                file.filename or "",
                file.content_type or "",
                document_type,
                report_id,
                candidate_id,
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except StorageFullError as exc:
            Log.error(f"Upload rejected, storage full: {exc}")
            raise HTTPException(status_code=507, detail="storage_full") from exc
        except StorageError as exc:
            Log.error(f"Upload failed while storing file: {exc}")
            raise HTTPException(status_code=500, detail="storage_error") from exc
        return DocumentResponse.from_document(document)

    # Registered before /documents/{document_id} so the path is not taken as an ID.
    @router.get("/documents/review-queue", response_model=list[DocumentResponse])
    def review_queue() -> list[DocumentResponse]:
        return [DocumentResponse.from_document(d) for d in review.review_queue()]

    @router.get("/documents/{document_id}", response_model=DocumentResponse)
    def get_document(document_id: str) -> DocumentResponse:
        document = review.get_document(document_id)
        if document is None:
            raise HTTPException(status_code=404, detail="document_not_found")
        return DocumentResponse.from_document(document)

    @router.put("/documents/{document_id}/verification", response_model=DocumentResponse)
    def update_verification(
        document_id: str,
        body: VerificationUpdateRequest,
    ) -> DocumentResponse:
        document = review.update_verification_status(
            document_id, body.status, comment=body.comment
        )
        if document is None:
            raise HTTPException(status_code=404, detail="document_not_found")
        return DocumentResponse.from_document(document)

    @router.post("/documents/{document_id}/reevaluate", status_code=202)
    def reevaluate(document_id: str) -> dict[str, str]:
        if not review.reevaluate(document_id):
            raise HTTPException(status_code=404, detail="document_not_found")
        return {"document_id": document_id, "status": "scheduled"}

    @router.delete("/documents/{document_id}", response_model=DeleteResponse)
    def delete_document(document_id: str) -> DeleteResponse:
        outcome = review.delete_document(document_id)
        if not outcome:
            raise HTTPException(status_code=404, detail="document_not_found")
        return DeleteResponse.from_outcome(outcome)

    @router.get("/reports/{report_id}/documents", response_model=list[DocumentResponse])
    def report_documents(report_id: str) -> list[DocumentResponse]:
        return [DocumentResponse.from_document(d) for d in review.list_report_documents(report_id)]

    @router.get("/candidates/{candidate_id}/documents", response_model=list[DocumentResponse])
    def candidate_documents(candidate_id: str) -> list[DocumentResponse]:
        return [
            DocumentResponse.from_document(d)
            for d in review.list_candidate_documents(candidate_id)
        ]

    return router
