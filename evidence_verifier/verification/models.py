from dataclasses import dataclass, field
from datetime import datetime

from evidence_verifier.documents.models import DocumentType


@dataclass(frozen=True)
class FileMetadata:
    """Facts read from the file itself, independent of what the submitter declared."""

    size_bytes: int
    created_at: datetime | None = None
    modified_at: datetime | None = None
    software: str | None = None


@dataclass
class AnalysisResult:
    """Output of one verification pass. Never persisted as-is."""

    is_verified: bool = False
    confidence_score: float = 0.0
    anomalies: list[str] = field(default_factory=list)
    summary: str = ""
    extracted_data: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class EvaluationContext:
    """Accumulates state as a file moves through the analysis stages."""

    file_bytes: bytes
    file_name: str
    document_type: DocumentType
    result: AnalysisResult = field(default_factory=AnalysisResult)
    metadata: FileMetadata | None = None
    type_check_passed: bool = False

    @property
    def extracted_text(self) -> str:
        return self.result.extracted_data.get("text", "")
