from abc import ABC, abstractmethod
from dataclasses import dataclass

from evidence_verifier.documents.models import Document, VerificationStatus
from evidence_verifier.verification.models import AnalysisResult


@dataclass(slots=True)
class PipelineContext:
    document_id: str
    reevaluate: bool = False
    document: Document | None = None
    raw_bytes: bytes = b""
    analysis_result: AnalysisResult | None = None
    updated_document: Document | None = None
    skipped: bool = False
    error_message: str = ""

    @property
    def expected_status(self) -> VerificationStatus | None:
        """Status the row must still have for this pass to write its verdict."""
        return None if self.reevaluate else VerificationStatus.PENDING


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
