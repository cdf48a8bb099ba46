from abc import ABC, abstractmethod
from typing import ClassVar

from evidence_verifier.documents.models import DocumentType
from evidence_verifier.verification.analyzers import BaseTypeAnalyzer
from evidence_verifier.verification.heuristics import BaseDetector
from evidence_verifier.verification.metadata import MetadataReader
from evidence_verifier.verification.models import EvaluationContext
from evidence_verifier.verification.text_extraction import (
    TextExtractor,
    extract_identity_fields,
)

ANOMALY_FILE_TOO_LARGE = "file too large"
ANOMALY_MODIFICATION_DATES = "suspicious modification dates"
ANOMALY_TAMPERING = "possible tampering/pattern detected"


class BaseStage(ABC):
    name: ClassVar[str]

    @abstractmethod
    def run(self, context: EvaluationContext) -> None:
        raise NotImplementedError


class MetadataStage(BaseStage):
    name = "metadata check"

    def __init__(self, metadata_reader: MetadataReader, max_file_bytes: int) -> None:
        self._metadata_reader = metadata_reader
        self._max_file_bytes = max_file_bytes

    def run(self, context: EvaluationContext) -> None:
        if len(context.file_bytes) > self._max_file_bytes:
            context.result.anomalies.append(ANOMALY_FILE_TOO_LARGE)

        metadata = self._metadata_reader.read(context.file_bytes, context.file_name)
        context.metadata = metadata
        if (
            metadata.created_at is not None
            and metadata.modified_at is not None
            and metadata.modified_at < metadata.created_at
        ):
            context.result.anomalies.append(ANOMALY_MODIFICATION_DATES)


class TextExtractionStage(BaseStage):
    name = "text extraction"

    def __init__(self, text_extractor: TextExtractor) -> None:
        self._text_extractor = text_extractor

    def run(self, context: EvaluationContext) -> None:
        text = self._text_extractor.extract(context.file_bytes, context.file_name)
        if not text:
            return
        context.result.extracted_data["text"] = text
        context.result.extracted_data.update(extract_identity_fields(text))


class TypeAnalysisStage(BaseStage):
    name = "document analysis"

    def __init__(
        self,
        analyzers: dict[DocumentType, BaseTypeAnalyzer],
        default_analyzer: BaseTypeAnalyzer,
    ) -> None:
        self._analyzers = analyzers
        self._default_analyzer = default_analyzer

    def run(self, context: EvaluationContext) -> None:
        analyzer = self._analyzers.get(context.document_type, self._default_analyzer)
        analyzer.analyze(context)


class TamperStage(BaseStage):
    name = "tamper check"

    def __init__(self, detector: BaseDetector, penalty_factor: float = 0.5) -> None:
        self._detector = detector
        self._penalty_factor = penalty_factor

    def run(self, context: EvaluationContext) -> None:
        if self._detector.detect(context):
            context.result.anomalies.append(ANOMALY_TAMPERING)
            context.result.confidence_score *= self._penalty_factor
