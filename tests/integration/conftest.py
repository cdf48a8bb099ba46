import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from evidence_verifier.config.settings import Settings
from evidence_verifier.database.connection import close_pool, get_connection, init_pool
from evidence_verifier.database.repositories.document_repository import DocumentRepository
from evidence_verifier.database.schema import create_schema
from evidence_verifier.documents.models import Document, DocumentType, NewDocument
from evidence_verifier.storage.local_blob_store import LocalBlobStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "voteshield_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        create_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Document IDs to delete after the test. Their jobs go with them."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path / "files"


@pytest.fixture
def integration_blob_store(files_root: Path) -> LocalBlobStore:
    return LocalBlobStore(files_root)


@pytest.fixture
def document_repo(
    integration_pool: None, integration_blob_store: LocalBlobStore
) -> DocumentRepository:
    return DocumentRepository(integration_blob_store)


@pytest.fixture
def seed_document(
    document_repo: DocumentRepository,
    integration_blob_store: LocalBlobStore,
    integration_cleanup: list[str],
    jpeg_bytes: bytes,
) -> Document:
    storage_key = integration_blob_store.put(jpeg_bytes, ".jpg", partition="Evidence_Photo")
    document = document_repo.create(
        NewDocument(
            storage_key=storage_key,
            original_file_name="booth.jpg",
            content_type="image/jpeg",
            size_bytes=len(jpeg_bytes),
            document_type=DocumentType.EVIDENCE_PHOTO,
        )
    )
    integration_cleanup.append(document.id)
    return document
