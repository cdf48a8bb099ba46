import random
import re
from abc import ABC, abstractmethod

from evidence_verifier.verification.metadata import is_pdf
from evidence_verifier.verification.models import EvaluationContext

EDITING_SOFTWARE = (
    "photoshop",
    "gimp",
    "paint.net",
    "pixelmator",
    "affinity photo",
    "snapseed",
    "picsart",
    "facetune",
)
_EDITOR_BYTE_MARKERS = (b"adobe photoshop", b"created with gimp", b"paint.net")
_CASH_PATTERN_RE = re.compile(r"\b(?:cash|bribe|bribery|rupees|npr)\b|घूस|नगद", re.IGNORECASE)


class BaseDetector(ABC):
    """A yes/no heuristic evaluated against a file under analysis."""

    @abstractmethod
    def detect(self, context: EvaluationContext) -> bool:
        raise NotImplementedError


class EditingSoftwareDetector(BaseDetector):
    """Flags files that carry traces of an image editor or of incremental PDF edits."""

    def detect(self, context: EvaluationContext) -> bool:
        software = (context.metadata.software or "").lower() if context.metadata else ""
        if any(name in software for name in EDITING_SOFTWARE):
            return True
        if is_pdf(context.file_bytes, context.file_name):
            return context.file_bytes.count(b"%%EOF") > 1
        lowered = context.file_bytes.lower()
        return any(marker in lowered for marker in _EDITOR_BYTE_MARKERS)


class CashPatternDetector(BaseDetector):
    """Flags extracted text that mentions cash or bribes."""

    def detect(self, context: EvaluationContext) -> bool:
        return _CASH_PATTERN_RE.search(context.extracted_text) is not None


class RandomDetector(BaseDetector):
    """Fires with a fixed probability. Seed the generator for reproducible runs."""

    def __init__(self, probability: float, rng: random.Random | None = None) -> None:
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        self._probability = probability
        self._rng = rng or random.Random()

    def detect(self, context: EvaluationContext) -> bool:
        return self._rng.random() < self._probability
