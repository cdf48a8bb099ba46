from datetime import datetime
from unittest.mock import MagicMock

import pytest

from evidence_verifier.documents.models import DocumentType
from evidence_verifier.verification.analyzers import BaselineAnalyzer, IdCardAnalyzer
from evidence_verifier.verification.engine import HeuristicVerificationEngine, render_summary
from evidence_verifier.verification.models import AnalysisResult, EvaluationContext, FileMetadata
from evidence_verifier.verification.stages import (
    ANOMALY_FILE_TOO_LARGE,
    ANOMALY_MODIFICATION_DATES,
    ANOMALY_TAMPERING,
    BaseStage,
    MetadataStage,
    TamperStage,
    TextExtractionStage,
    TypeAnalysisStage,
)


class _ScoreStage(BaseStage):
    name = "score"

    def __init__(self, score: float, passed: bool = True) -> None:
        self._score = score
        self._passed = passed

    def run(self, context: EvaluationContext) -> None:
        context.result.confidence_score = self._score
        context.type_check_passed = self._passed


class _FailingStage(BaseStage):
    name = "flaky"

    def run(self, context: EvaluationContext) -> None:
        raise RuntimeError("exploded")


def _context(file_bytes: bytes = b"data", document_type=DocumentType.ID_CARD) -> EvaluationContext:
    return EvaluationContext(file_bytes=file_bytes, file_name="f.pdf", document_type=document_type)


class TestMetadataStage:
    def test_oversized_file_is_flagged(self) -> None:
        reader = MagicMock()
        reader.read.return_value = FileMetadata(size_bytes=11)
        context = _context(b"x" * 11)

        MetadataStage(reader, max_file_bytes=10).run(context)

        assert context.result.anomalies == [ANOMALY_FILE_TOO_LARGE]

    def test_modified_before_created_is_flagged(self) -> None:
        reader = MagicMock()
        reader.read.return_value = FileMetadata(
            size_bytes=4,
            created_at=datetime(2024, 2, 1),
            modified_at=datetime(2024, 1, 1),
        )
        context = _context()

        MetadataStage(reader, max_file_bytes=100).run(context)

        assert context.result.anomalies == [ANOMALY_MODIFICATION_DATES]
        assert context.metadata is reader.read.return_value

    def test_consistent_dates_are_clean(self) -> None:
        reader = MagicMock()
        reader.read.return_value = FileMetadata(
            size_bytes=4,
            created_at=datetime(2024, 1, 1),
            modified_at=datetime(2024, 1, 1),
        )
        context = _context()

        MetadataStage(reader, max_file_bytes=100).run(context)

        assert context.result.anomalies == []


class TestTextExtractionStage:
    def test_stores_text_and_identity_fields(self) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = "Name: Sita Rai\nDOB: 01-01-1985"
        context = _context()

        TextExtractionStage(extractor).run(context)

        assert context.result.extracted_data == {
            "text": "Name: Sita Rai\nDOB: 01-01-1985",
            "name": "Sita Rai",
            "dob": "01-01-1985",
        }

    def test_empty_text_leaves_no_entry(self) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = ""
        context = _context()

        TextExtractionStage(extractor).run(context)

        assert context.result.extracted_data == {}


class TestTypeAnalysisStage:
    def test_dispatches_by_document_type(self) -> None:
        id_analyzer = MagicMock()
        default = MagicMock()
        stage = TypeAnalysisStage({DocumentType.ID_CARD: id_analyzer}, default)
        context = _context()

        stage.run(context)

        id_analyzer.analyze.assert_called_once_with(context)
        default.analyze.assert_not_called()

    def test_falls_back_to_default(self) -> None:
        default = MagicMock()
        stage = TypeAnalysisStage({DocumentType.ID_CARD: MagicMock()}, default)
        context = _context(document_type=DocumentType.LEGAL_DOCUMENT)

        stage.run(context)

        default.analyze.assert_called_once_with(context)


class TestTamperStage:
    def test_halves_confidence_when_detected(self) -> None:
        detector = MagicMock()
        detector.detect.return_value = True
        context = _context()
        context.result.confidence_score = 0.85

        TamperStage(detector).run(context)

        assert context.result.confidence_score == pytest.approx(0.425)
        assert context.result.anomalies == [ANOMALY_TAMPERING]

    def test_no_change_when_clean(self) -> None:
        detector = MagicMock()
        detector.detect.return_value = False
        context = _context()
        context.result.confidence_score = 0.85

        TamperStage(detector).run(context)

        assert context.result.confidence_score == 0.85
        assert context.result.anomalies == []


class TestHeuristicVerificationEngine:
    def test_verified_when_score_high_and_clean(self) -> None:
        engine = HeuristicVerificationEngine([_ScoreStage(0.85)])

        result = engine.evaluate(b"data", "a.jpg", DocumentType.EVIDENCE_PHOTO)

        assert result.is_verified is True
        assert result.confidence_score == 0.85
        assert result.summary.startswith("Document analysis complete - confidence: 0.85")

    def test_anomaly_blocks_verification(self) -> None:
        class _AnomalyStage(BaseStage):
            name = "anomaly"

            def run(self, context: EvaluationContext) -> None:
                context.result.anomalies.append("something odd")

        engine = HeuristicVerificationEngine([_ScoreStage(0.95), _AnomalyStage()])

        result = engine.evaluate(b"data", "a.jpg", DocumentType.EVIDENCE_PHOTO)

        assert result.is_verified is False

    def test_failed_type_check_blocks_verification(self) -> None:
        engine = HeuristicVerificationEngine([_ScoreStage(0.75, passed=False)])

        result = engine.evaluate(b"data", "clip.mp4", DocumentType.EVIDENCE_VIDEO)

        assert result.is_verified is False

    def test_score_below_threshold_is_not_verified(self) -> None:
        engine = HeuristicVerificationEngine([_ScoreStage(0.69)])

        result = engine.evaluate(b"data", "a.jpg", DocumentType.EVIDENCE_PHOTO)

        assert result.is_verified is False

    def test_failing_stage_becomes_anomaly_and_later_stages_run(self) -> None:
        later = _ScoreStage(0.9)
        engine = HeuristicVerificationEngine([_FailingStage(), later])

        result = engine.evaluate(b"data", "a.pdf", DocumentType.ID_CARD)

        assert result.anomalies == ["flaky stage failed: exploded"]
        assert result.confidence_score == 0.9
        assert result.is_verified is False

    def test_score_is_clamped(self) -> None:
        engine = HeuristicVerificationEngine([_ScoreStage(1.7)])

        result = engine.evaluate(b"data", "a.pdf", DocumentType.ID_CARD)

        assert result.confidence_score == 1.0

    def test_is_deterministic_for_same_input(self) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = "Citizenship Nepal Republic Date 12-05-1990 12345"
        engine = HeuristicVerificationEngine(
            [
                TextExtractionStage(extractor),
                TypeAnalysisStage({DocumentType.ID_CARD: IdCardAnalyzer()}, BaselineAnalyzer()),
            ]
        )

        first = engine.evaluate(b"x", "card.pdf", DocumentType.ID_CARD)
        second = engine.evaluate(b"x", "card.pdf", DocumentType.ID_CARD)

        assert first == second
        assert first.is_verified is True


class TestRenderSummary:
    def test_verified_without_anomalies(self) -> None:
        result = AnalysisResult(is_verified=True, confidence_score=0.9)

        assert render_summary(result) == (
            "Document analysis complete - confidence: 0.90\n"
            "Status: VERIFIED\n"
            "No anomalies detected"
        )

    def test_lists_anomalies(self) -> None:
        result = AnalysisResult(
            confidence_score=0.425,
            anomalies=["possible tampering/pattern detected", "file too large"],
        )

        assert render_summary(result) == (
            "Document analysis complete - confidence: 0.42\n"
            "Status: REQUIRES REVIEW\n"
            "Anomalies detected: possible tampering/pattern detected, file too large"
        )
