from collections.abc import Sequence

from evidence_verifier.documents.models import DocumentType
from evidence_verifier.logging.logger import Log
from evidence_verifier.verification.analyzers import VERIFICATION_THRESHOLD
from evidence_verifier.verification.base import BaseVerificationEngine
from evidence_verifier.verification.models import AnalysisResult, EvaluationContext
from evidence_verifier.verification.stages import BaseStage


def render_summary(result: AnalysisResult) -> str:
    """Human-readable verdict: score, label, then anomalies."""
    lines = [
        f"Document analysis complete - confidence: {result.confidence_score:.2f}",
        f"Status: {'VERIFIED' if result.is_verified else 'REQUIRES REVIEW'}",
    ]
    if result.anomalies:
        lines.append(f"Anomalies detected: {', '.join(result.anomalies)}")
    else:
        lines.append("No anomalies detected")
    return "\n".join(lines)


class HeuristicVerificationEngine(BaseVerificationEngine):
    """Runs the analysis stages in order and combines them into one verdict.

    A failing stage is logged and recorded as an anomaly; the remaining
    stages still run.
    """

    def __init__(self, stages: Sequence[BaseStage]) -> None:
        self._stages = list(stages)

    def evaluate(
        self,
        file_bytes: bytes,
        file_name: str,
        document_type: DocumentType,
    ) -> AnalysisResult:
        context = EvaluationContext(
            file_bytes=file_bytes,
            file_name=file_name,
            document_type=document_type,
        )
        for stage in self._stages:
            try:
                stage.run(context)
            except Exception as exc:
                Log.error(f"Stage '{stage.name}' failed for {file_name}: {exc}")
                context.result.anomalies.append(f"{stage.name} stage failed: {exc}")

        result = context.result
        result.confidence_score = min(max(result.confidence_score, 0.0), 1.0)
        result.is_verified = (
            context.type_check_passed
            and result.confidence_score >= VERIFICATION_THRESHOLD
            and not result.anomalies
        )
        result.summary = render_summary(result)
        Log.debug(
            f"Evaluated {file_name} as {document_type.value}: "
            f"confidence={result.confidence_score:.2f}, anomalies={len(result.anomalies)}"
        )
        return result
