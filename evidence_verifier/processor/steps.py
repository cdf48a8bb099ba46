from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError

from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.documents.models import (
    EXTRACTED_FIELD_NAMES,
    Document,
    VerificationStatus,
)
from evidence_verifier.logging.logger import Log
from evidence_verifier.processor.exceptions import DocumentNotFoundError
from evidence_verifier.processor.pipeline import PipelineContext, PipelineStep
from evidence_verifier.storage.base import BaseBlobStore
from evidence_verifier.verification.base import BaseVerificationEngine
from evidence_verifier.verification.exceptions import AnalysisError, AnalysisTimeoutError
from evidence_verifier.verification.models import AnalysisResult

ANOMALY_VERIFICATION_FAILED = "verification failed"


class LoadDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        document = self._doc_repo.find_by_id(context.document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {context.document_id} not found")
        context.document = document

        if not context.reevaluate and document.verification_status != VerificationStatus.PENDING:
            Log.warning(
                f"Document {context.document_id} is already "
                f"{document.verification_status.value}, skipping duplicate pass"
            )
            context.skipped = True
        return context


class ReadBlobStep(PipelineStep):
    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    def run(self, context: PipelineContext) -> PipelineContext:
        document = _require_document(context)
        with self._blob_store.open_for_read(document.storage_key) as stream:
            context.raw_bytes = stream.read()
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for document {context.document_id}")
        return context


class EvaluateStep(PipelineStep):
    """Runs the engine, bounded by a timeout when one is configured."""

    def __init__(self, engine: BaseVerificationEngine, timeout_seconds: float) -> None:
        self._engine = engine
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        document = _require_document(context)
        try:
            context.analysis_result = self._evaluate(document, context.raw_bytes)
        except AnalysisError:
            raise
        except Exception as exc:
            raise AnalysisError(f"Verification engine failed: {exc}") from exc

        result = context.analysis_result
        Log.info(
            f"Evaluated document {context.document_id}: "
            f"confidence={result.confidence_score:.2f}, anomalies={len(result.anomalies)}"
        )
        return context

    def _evaluate(self, document: Document, raw_bytes: bytes) -> AnalysisResult:
        if self._timeout_seconds <= 0:
            return self._engine.evaluate(
                raw_bytes, document.original_file_name, document.document_type
            )

        # A hung engine call keeps its thread; the pass itself is abandoned.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="evaluate")
        future = executor.submit(
            self._engine.evaluate,
            raw_bytes,
            document.original_file_name,
            document.document_type,
        )
        try:
            return future.result(timeout=self._timeout_seconds)
        except FuturesTimeoutError as exc:
            raise AnalysisTimeoutError(
                f"Evaluation did not finish within {self._timeout_seconds:g}s"
            ) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


class PersistVerdictStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        result = context.analysis_result
        if result is None:
            raise ValueError("PipelineContext.analysis_result must be set before persist")

        status = (
            VerificationStatus.VERIFIED if result.is_verified else VerificationStatus.UNDER_REVIEW
        )
        updated = self._doc_repo.update_verification(
            context.document_id,
            status=status,
            confidence_score=result.confidence_score,
            analysis_summary=result.summary,
            anomalies=result.anomalies,
            extracted_text=result.extracted_data.get("text"),
            extracted_fields={
                name: result.extracted_data[name]
                for name in EXTRACTED_FIELD_NAMES
                if name in result.extracted_data
            },
            expected_status=context.expected_status,
        )
        if updated is None:
            Log.warning(
                f"Verdict for document {context.document_id} not written: "
                "document was deleted or already evaluated"
            )
            context.skipped = True
            return context

        context.updated_document = updated
        Log.info(f"Document {context.document_id} marked as {status.value}")
        return context


class MarkUnderReviewStep(PipelineStep):
    """Failure path: leaves the document in a terminal state a reviewer will see."""

    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        updated = self._doc_repo.update_verification(
            context.document_id,
            status=VerificationStatus.UNDER_REVIEW,
            confidence_score=None,
            analysis_summary=f"Analysis failed: {context.error_message}",
            anomalies=[ANOMALY_VERIFICATION_FAILED],
            expected_status=context.expected_status,
        )
        context.updated_document = updated
        if updated is None:
            Log.error(
                f"Could not record failure for document {context.document_id}: "
                f"{context.error_message}"
            )
        else:
            Log.error(
                f"Document {context.document_id} sent to review after failure: "
                f"{context.error_message}"
            )
        return context


def _require_document(context: PipelineContext) -> Document:
    if context.document is None:
        raise ValueError("PipelineContext.document must be set before this step")
    return context.document
