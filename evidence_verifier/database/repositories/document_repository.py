import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from evidence_verifier.database.connection import get_connection
from evidence_verifier.documents.models import (
    EXTRACTED_FIELD_NAMES,
    DeleteOutcome,
    Document,
    DocumentType,
    NewDocument,
    VerificationStatus,
)
from evidence_verifier.logging.logger import Log
from evidence_verifier.storage.base import BaseBlobStore

_COLUMNS = """
    id, storage_key, original_file_name, content_type, size_bytes,
    document_type, verification_status, confidence_score, analysis_summary,
    detected_anomalies, extracted_text, extracted_name, extracted_address,
    extracted_dob, extracted_id_number, report_id, candidate_id, uploaded_at
"""


def _parse_id(value: str | None) -> uuid.UUID | None:
    if value is None:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _row_to_document(row: dict[str, Any]) -> Document:
    extracted_fields = {
        name: row[f"extracted_{name}"]
        for name in EXTRACTED_FIELD_NAMES
        if row[f"extracted_{name}"] is not None
    }
    return Document(
        id=str(row["id"]),
        storage_key=row["storage_key"],
        original_file_name=row["original_file_name"],
        content_type=row["content_type"],
        size_bytes=row["size_bytes"],
        document_type=DocumentType(row["document_type"]),
        verification_status=VerificationStatus(row["verification_status"]),
        uploaded_at=row["uploaded_at"],
        confidence_score=row["confidence_score"],
        analysis_summary=row["analysis_summary"],
        detected_anomalies=list(row["detected_anomalies"] or []),
        extracted_text=row["extracted_text"],
        extracted_fields=extracted_fields,
        report_id=_optional_str(row["report_id"]),
        candidate_id=_optional_str(row["candidate_id"]),
    )


class DocumentRepository:
    """Database operations for the documents table.

    Deleting a document also removes its blob through the blob store.
    """

    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    def create(self, new_document: NewDocument) -> Document:
        """Insert a document row. Status always starts as Pending."""
        if new_document.report_id is not None and new_document.candidate_id is not None:
            raise ValueError("A document can belong to a report or a candidate, not both")

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents (
                        id, storage_key, original_file_name, content_type,
                        size_bytes, document_type, verification_status,
                        report_id, candidate_id
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        uuid.uuid4(),
                        new_document.storage_key,
                        new_document.original_file_name,
                        new_document.content_type,
                        new_document.size_bytes,
                        new_document.document_type.value,
                        VerificationStatus.PENDING.value,
                        _parse_id(new_document.report_id),
                        _parse_id(new_document.candidate_id),
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT INTO documents returned no row")
        return _row_to_document(row)

    def find_by_id(self, document_id: str) -> Document | None:
        """Find a document by ID. Malformed IDs are treated as not found."""
        parsed_id = _parse_id(document_id)
        if parsed_id is None:
            return None

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s",
                    (parsed_id,),
                )
                row = cur.fetchone()

        return _row_to_document(row) if row is not None else None

    def update_verification(
        self,
        document_id: str,
        *,
        status: VerificationStatus,
        confidence_score: float | None,
        analysis_summary: str,
        anomalies: list[str],
        extracted_text: str | None = None,
        extracted_fields: dict[str, str] | None = None,
        expected_status: VerificationStatus | None = None,
    ) -> Document | None:
        """Write a complete verdict in one statement.

        All verdict columns are replaced together, including extracted fields
        that are absent from this pass. With expected_status set, the row is
        only updated if it still has that status.

        Returns:
            The updated document, or None if no row matched.
        """
        parsed_id = _parse_id(document_id)
        if parsed_id is None:
            return None

        fields = extracted_fields or {}
        status_clause = "AND verification_status = %s" if expected_status is not None else ""
        params: list[Any] = [
            status.value,
            confidence_score,
            analysis_summary,
            Jsonb(list(anomalies)),
            extracted_text,
            *(fields.get(name) for name in EXTRACTED_FIELD_NAMES),
            parsed_id,
        ]
        if expected_status is not None:
            params.append(expected_status.value)

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE documents
                    SET verification_status = %s,
                        confidence_score = %s,
                        analysis_summary = %s,
                        detected_anomalies = %s,
                        extracted_text = %s,
                        extracted_name = %s,
                        extracted_address = %s,
                        extracted_dob = %s,
                        extracted_id_number = %s
                    WHERE id = %s {status_clause}
                    RETURNING {_COLUMNS}
                    """,
                    tuple(params),
                )
                row = cur.fetchone()
            conn.commit()

        return _row_to_document(row) if row is not None else None

    def update_status(
        self,
        document_id: str,
        status: VerificationStatus,
        comment: str | None = None,
    ) -> Document | None:
        """Set the status directly (reviewer override).

        A non-empty comment replaces analysis_summary; otherwise the summary
        is left as it is.
        """
        parsed_id = _parse_id(document_id)
        if parsed_id is None:
            return None

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE documents
                    SET verification_status = %s,
                        analysis_summary = COALESCE(%s, analysis_summary)
                    WHERE id = %s
                    RETURNING {_COLUMNS}
                    """,
                    (status.value, comment or None, parsed_id),
                )
                row = cur.fetchone()
            conn.commit()

        return _row_to_document(row) if row is not None else None

    def list_by_report(self, report_id: str) -> list[Document]:
        """Documents attached to a report, newest first."""
        return self._list_by_owner("report_id", report_id)

    def list_by_candidate(self, candidate_id: str) -> list[Document]:
        """Documents attached to a candidate, newest first."""
        return self._list_by_owner("candidate_id", candidate_id)

    def list_pending_or_under_review(self) -> list[Document]:
        """Reviewer queue, oldest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM documents
                    WHERE verification_status IN (%s, %s)
                    ORDER BY uploaded_at ASC
                    """,
                    (VerificationStatus.PENDING.value, VerificationStatus.UNDER_REVIEW.value),
                )
                rows = cur.fetchall()
        return [_row_to_document(row) for row in rows]

    def delete(self, document_id: str) -> DeleteOutcome:
        """Delete the row, then its blob.

        Blob removal is best-effort: a failure is logged and reported in the
        outcome's warnings, and the row stays deleted.
        """
        parsed_id = _parse_id(document_id)
        if parsed_id is None:
            return DeleteOutcome(deleted=False)

        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM documents WHERE id = %s RETURNING storage_key",
                    (parsed_id,),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return DeleteOutcome(deleted=False)

        storage_key: str = row[0]
        warnings: list[str] = []
        try:
            if not self._blob_store.delete(storage_key):
                warnings.append(f"Blob {storage_key} was already missing")
        except Exception as exc:
            warnings.append(f"Blob {storage_key} could not be deleted: {exc}")

        for warning in warnings:
            Log.warning(f"Document {document_id} deleted with warning: {warning}")
        Log.info(f"Deleted document {document_id}")
        return DeleteOutcome(deleted=True, warnings=warnings)

    def _list_by_owner(self, column: str, owner_id: str) -> list[Document]:
        parsed_id = _parse_id(owner_id)
        if parsed_id is None:
            return []

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM documents
                    WHERE {column} = %s
                    ORDER BY uploaded_at DESC
                    """,
                    (parsed_id,),
                )
                rows = cur.fetchall()
        return [_row_to_document(row) for row in rows]
