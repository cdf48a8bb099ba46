"""Idempotent DDL for the documents table and the verification job queue."""

from evidence_verifier.database.connection import get_connection
from evidence_verifier.logging.logger import Log

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS documents (
        id UUID PRIMARY KEY,
        storage_key TEXT NOT NULL UNIQUE,
        original_file_name TEXT NOT NULL,
        content_type TEXT NOT NULL,
        size_bytes BIGINT NOT NULL,
        document_type TEXT NOT NULL,
        verification_status TEXT NOT NULL DEFAULT 'Pending',
        confidence_score DOUBLE PRECISION,
        analysis_summary TEXT,
        detected_anomalies JSONB NOT NULL DEFAULT '[]'::jsonb,
        extracted_text TEXT,
        extracted_name TEXT,
        extracted_address TEXT,
        extracted_dob TEXT,
        extracted_id_number TEXT,
        report_id UUID,
        candidate_id UUID,
        uploaded_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        CONSTRAINT documents_single_owner
            CHECK (report_id IS NULL OR candidate_id IS NULL),
        CONSTRAINT documents_confidence_range
            CHECK (confidence_score IS NULL OR confidence_score BETWEEN 0 AND 1)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_documents_report
    ON documents (report_id, uploaded_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_documents_candidate
    ON documents (candidate_id, uploaded_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_documents_status
    ON documents (verification_status, uploaded_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS verification_jobs (
        id BIGSERIAL PRIMARY KEY,
        document_id UUID NOT NULL REFERENCES documents (id) ON DELETE CASCADE,
        reevaluate BOOLEAN NOT NULL DEFAULT FALSE,
        status TEXT NOT NULL DEFAULT 'pending',
        error_message TEXT,
        locked_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_verification_jobs_pending
    ON verification_jobs (created_at)
    WHERE status = 'pending'
    """,
)


def create_schema() -> None:
    """Create tables and indexes if they do not exist yet."""
    with get_connection() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(statement)
        conn.commit()
    Log.info("Database schema is up to date")
