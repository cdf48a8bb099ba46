from abc import ABC, abstractmethod

from evidence_verifier.documents.models import DocumentType
from evidence_verifier.verification.models import AnalysisResult


class BaseVerificationEngine(ABC):
    """Contract for all verification engines.

    Implementations are stateless between calls so one instance can serve
    concurrent evaluations.
    """

    @abstractmethod
    def evaluate(
        self,
        file_bytes: bytes,
        file_name: str,
        document_type: DocumentType,
    ) -> AnalysisResult:
        """Analyse one file and return a scored verdict.

        Raises:
            AnalysisError: if the file cannot be analysed at all. Failures
                of individual stages are reported as anomalies instead.
        """
