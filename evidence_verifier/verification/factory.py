import random

from evidence_verifier.config.settings import Settings
from evidence_verifier.documents.models import DocumentType
from evidence_verifier.pdf.base import BasePdfExtractor
from evidence_verifier.pdf.pdfplumber_adapter import PdfPlumberAdapter
from evidence_verifier.pdf.pymupdf_adapter import PyMuPdfAdapter
from evidence_verifier.verification.analyzers import (
    BaselineAnalyzer,
    EvidencePhotoAnalyzer,
    EvidenceVideoAnalyzer,
    IdCardAnalyzer,
)
from evidence_verifier.verification.base import BaseVerificationEngine
from evidence_verifier.verification.engine import HeuristicVerificationEngine
from evidence_verifier.verification.heuristics import (
    BaseDetector,
    CashPatternDetector,
    EditingSoftwareDetector,
    RandomDetector,
)
from evidence_verifier.verification.metadata import MetadataReader
from evidence_verifier.verification.stages import (
    MetadataStage,
    TamperStage,
    TextExtractionStage,
    TypeAnalysisStage,
)
from evidence_verifier.verification.text_extraction import TextExtractor


class VerificationEngineFactory:
    """Creates the verification engine configured in settings."""

    PDF_ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }
    HEURISTICS_MODES = ("signature", "random")

    TAMPER_PROBABILITY = 0.1
    CASH_PATTERN_PROBABILITY = 0.2

    @classmethod
    def create(cls, settings: Settings) -> BaseVerificationEngine:
        pdf_extractor = cls.create_pdf_extractor(settings)
        tamper_detector, pattern_detector = cls._create_detectors(settings)
        stages = [
            MetadataStage(MetadataReader(pdf_extractor), settings.max_upload_bytes),
            TextExtractionStage(TextExtractor(pdf_extractor)),
            TypeAnalysisStage(
                analyzers={
                    DocumentType.ID_CARD: IdCardAnalyzer(),
                    DocumentType.EVIDENCE_PHOTO: EvidencePhotoAnalyzer(pattern_detector),
                    DocumentType.EVIDENCE_VIDEO: EvidenceVideoAnalyzer(),
                },
                default_analyzer=BaselineAnalyzer(),
            ),
            TamperStage(tamper_detector),
        ]
        return HeuristicVerificationEngine(stages)

    @classmethod
    def create_pdf_extractor(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return adapter_cls()

    @classmethod
    def _create_detectors(cls, settings: Settings) -> tuple[BaseDetector, BaseDetector]:
        mode = settings.heuristics_mode.lower()
        if mode == "signature":
            return EditingSoftwareDetector(), CashPatternDetector()
        if mode == "random":
            rng = random.Random(settings.heuristics_random_seed)
            return (
                RandomDetector(cls.TAMPER_PROBABILITY, rng),
                RandomDetector(cls.CASH_PATTERN_PROBABILITY, rng),
            )
        raise ValueError(
            f"Unknown heuristics mode '{mode}'. Choose from: {list(cls.HEURISTICS_MODES)}"
        )
