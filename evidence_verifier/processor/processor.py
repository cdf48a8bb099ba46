from collections.abc import Sequence

from evidence_verifier.config.settings import Settings
from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.logging.logger import Log
from evidence_verifier.processor.pipeline import PipelineContext, PipelineStep
from evidence_verifier.processor.steps import (
    EvaluateStep,
    LoadDocumentStep,
    MarkUnderReviewStep,
    PersistVerdictStep,
    ReadBlobStep,
)
from evidence_verifier.storage.base import BaseBlobStore
from evidence_verifier.verification.base import BaseVerificationEngine
from evidence_verifier.verification.factory import VerificationEngineFactory


class Processor:
    """Drives one document through a verification pass.

    Pipeline: load -> read blob -> evaluate -> persist verdict.
    If any step raises, the failed step records the error on the document
    and the exception is re-raised to the caller.
    """

    def __init__(self, steps: Sequence[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = list(steps)
        self._failed_step = failed_step

    def process(self, document_id: str, reevaluate: bool = False) -> PipelineContext:
        """Run the full verification pipeline for a document."""
        Log.info(
            f"{'Re-evaluating' if reevaluate else 'Verifying'} document {document_id}"
        )
        context = PipelineContext(document_id=document_id, reevaluate=reevaluate)
        try:
            for step in self._steps:
                context = step.run(context)
                if context.skipped:
                    break
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            self._failed_step.run(context)
            raise
        return context


def build_processor(
    settings: Settings,
    doc_repo: DocumentRepository,
    blob_store: BaseBlobStore,
    engine: BaseVerificationEngine | None = None,
) -> Processor:
    """Build a Processor with all required steps."""
    if engine is None:
        engine = VerificationEngineFactory.create(settings)
    steps = [
        LoadDocumentStep(doc_repo),
        ReadBlobStep(blob_store),
        EvaluateStep(engine, settings.verification_timeout_seconds),
        PersistVerdictStep(doc_repo),
    ]
    return Processor(steps=steps, failed_step=MarkUnderReviewStep(doc_repo))
