from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DocumentType(str, Enum):
    """Kind of evidentiary or identity file, declared by the submitter."""

    ID_CARD = "ID_Card"
    EVIDENCE_PHOTO = "Evidence_Photo"
    EVIDENCE_VIDEO = "Evidence_Video"
    SUPPORTING_DOCUMENT = "Supporting_Document"
    CANDIDATE_ASSET = "Candidate_Asset"
    LEGAL_DOCUMENT = "Legal_Document"


class VerificationStatus(str, Enum):
    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"
    SUSPICIOUS = "Suspicious"
    UNDER_REVIEW = "Under_Review"


EXTRACTED_FIELD_NAMES = ("name", "address", "dob", "id_number")


@dataclass(frozen=True)
class NewDocument:
    """Immutable attributes of an upload, before a row exists for it."""

    storage_key: str
    original_file_name: str
    content_type: str
    size_bytes: int
    document_type: DocumentType
    report_id: str | None = None
    candidate_id: str | None = None


@dataclass(frozen=True)
class Document:
    """Domain model for one uploaded file and its verification outcome."""

    id: str
    storage_key: str
    original_file_name: str
    content_type: str
    size_bytes: int
    document_type: DocumentType
    verification_status: VerificationStatus
    uploaded_at: datetime
    confidence_score: float | None = None
    analysis_summary: str | None = None
    detected_anomalies: list[str] = field(default_factory=list)
    extracted_text: str | None = None
    extracted_fields: dict[str, str] = field(default_factory=dict)
    report_id: str | None = None
    candidate_id: str | None = None


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of deleting a document; truthy iff the metadata row was removed."""

    deleted: bool
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.deleted
