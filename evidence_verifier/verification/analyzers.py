import re
from abc import ABC, abstractmethod

from evidence_verifier.verification.heuristics import BaseDetector
from evidence_verifier.verification.models import EvaluationContext

VERIFICATION_THRESHOLD = 0.7

ANOMALY_CASH_PATTERN = "possible cash exchange pattern detected"
ANOMALY_VIDEO_REVIEW = "video analysis requires manual review"


class BaseTypeAnalyzer(ABC):
    """Document-type specific scoring.

    Sets the running confidence and whether the type's own acceptance rule
    passed. May append anomalies and extracted data.
    """

    @abstractmethod
    def analyze(self, context: EvaluationContext) -> None:
        raise NotImplementedError


class IdCardAnalyzer(BaseTypeAnalyzer):
    """Scores identity cards by the identity markers found in their text."""

    MARKER_WEIGHT = 0.15
    ACCEPT_ABOVE = 0.8

    KEYWORDS: tuple[tuple[str, str], ...] = (
        ("नागरिकता", "Citizenship card detected"),
        ("Citizenship", "Citizenship card detected"),
        ("Republic", "Issuing republic found"),
        ("Nepal", "Issuing country found"),
        ("Date", "Date label found"),
        ("जन्म मिति", "Date of birth label found"),
    )
    PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
        (re.compile(r"\d{1,2}-\d{2}-\d{4}"), "Possible date pattern"),
        (re.compile(r"\d{4,10}"), "Possible citizenship number"),
    )

    def analyze(self, context: EvaluationContext) -> None:
        text = context.extracted_text
        folded = text.casefold()
        matches = 0

        for keyword, label in self.KEYWORDS:
            if keyword.casefold() in folded:
                matches += 1
                context.result.extracted_data[label] = "Found"
        for pattern, label in self.PATTERNS:
            if pattern.search(text):
                matches += 1
                context.result.extracted_data[label] = "Found"

        confidence = min(round(matches * self.MARKER_WEIGHT, 4), 1.0)
        context.result.confidence_score = confidence
        context.type_check_passed = confidence > self.ACCEPT_ABOVE


class EvidencePhotoAnalyzer(BaseTypeAnalyzer):
    def __init__(self, pattern_detector: BaseDetector, baseline_confidence: float = 0.85) -> None:
        self._pattern_detector = pattern_detector
        self._baseline_confidence = baseline_confidence

    def analyze(self, context: EvaluationContext) -> None:
        context.result.confidence_score = self._baseline_confidence
        if self._pattern_detector.detect(context):
            context.result.anomalies.append(ANOMALY_CASH_PATTERN)
        context.type_check_passed = self._baseline_confidence >= VERIFICATION_THRESHOLD


class EvidenceVideoAnalyzer(BaseTypeAnalyzer):
    """Videos get a moderate score and always go to a human."""

    def __init__(self, confidence: float = 0.75) -> None:
        self._confidence = confidence

    def analyze(self, context: EvaluationContext) -> None:
        context.result.confidence_score = self._confidence
        context.result.anomalies.append(ANOMALY_VIDEO_REVIEW)
        context.type_check_passed = False


class BaselineAnalyzer(BaseTypeAnalyzer):
    def __init__(self, confidence: float = 0.5) -> None:
        self._confidence = confidence

    def analyze(self, context: EvaluationContext) -> None:
        context.result.confidence_score = self._confidence
        context.type_check_passed = self._confidence >= VERIFICATION_THRESHOLD
