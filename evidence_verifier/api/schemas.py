from datetime import datetime

from pydantic import BaseModel, Field

from evidence_verifier.documents.models import (
    DeleteOutcome,
    Document,
    DocumentType,
    VerificationStatus,
)


class DocumentResponse(BaseModel):
    id: str
    original_file_name: str
    content_type: str
    size_bytes: int
    document_type: DocumentType
    verification_status: VerificationStatus
    confidence_score: float | None = None
    analysis_summary: str | None = None
    detected_anomalies: list[str] = Field(default_factory=list)
    extracted_text: str | None = None
    extracted_fields: dict[str, str] = Field(default_factory=dict)
    report_id: str | None = None
    candidate_id: str | None = None
    uploaded_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            original_file_name=document.original_file_name,
            content_type=document.content_type,
            size_bytes=document.size_bytes,
            document_type=document.document_type,
            verification_status=document.verification_status,
            confidence_score=document.confidence_score,
            analysis_summary=document.analysis_summary,
            detected_anomalies=list(document.detected_anomalies),
            extracted_text=document.extracted_text,
            extracted_fields=dict(document.extracted_fields),
            report_id=document.report_id,
            candidate_id=document.candidate_id,
            uploaded_at=document.uploaded_at,
        )


class VerificationUpdateRequest(BaseModel):
    status: VerificationStatus
    comment: str | None = None


class DeleteResponse(BaseModel):
    deleted: bool
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: DeleteOutcome) -> "DeleteResponse":
        return cls(deleted=outcome.deleted, warnings=list(outcome.warnings))
