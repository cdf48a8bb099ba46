import io
import random
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from evidence_verifier.documents.models import (
    DeleteOutcome,
    Document,
    NewDocument,
    VerificationStatus,
)
from evidence_verifier.storage.base import BaseBlobStore
from evidence_verifier.storage.local_blob_store import LocalBlobStore

ID_CARD_LINES = (
    "Government of Nepal",
    "Federal Democratic Republic",
    "Citizenship Certificate",
    "Citizenship No: 27017501234",
    "Name: Ram Bahadur Thapa",
    "Address: Ward 4, Kathmandu",
    "Date of Birth: 12-05-1990",
)


def _make_pdf(*lines: str, creator: str | None = None) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    if creator is not None:
        c.setCreator(creator)
    y = 720
    for line in lines:
        c.drawString(72, y, line)
        y -= 20
    c.save()
    return buf.getvalue()


def _make_jpeg(
    exif_tags: dict[int, str] | None = None,
    noise_size: tuple[int, int] | None = None,
    comment: str | None = None,
) -> bytes:
    """JPEG with optional top-level EXIF tags and COM comment.

    With noise_size the pixels are seeded random noise saved at quality 95, which
    gives photo-sized, high-entropy compressed data (1600x1100 is about 2 MB).
    """
    buf = io.BytesIO()
    if noise_size is None:
        image = Image.new("RGB", (32, 32), color=(120, 60, 30))
    else:
        width, height = noise_size
        pixels = random.Random(7).randbytes(width * height * 3)
        image = Image.frombytes("RGB", noise_size, pixels)
    options: dict[str, object] = {"quality": 95}
    if exif_tags:
        exif = Image.Exif()
        for tag, value in exif_tags.items():
            exif[tag] = value
        options["exif"] = exif
    if comment is not None:
        options["comment"] = comment
    image.save(buf, format="JPEG", **options)
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _make_pdf("Hello PDF World")


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def id_card_pdf_bytes() -> bytes:
    return _make_pdf(*ID_CARD_LINES)


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return _make_jpeg()


@pytest.fixture()
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "files")


class InMemoryDocumentRepository:
    """Thread-safe stand-in for DocumentRepository backed by a dict."""

    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def create(self, new_document: NewDocument) -> Document:
        if new_document.report_id is not None and new_document.candidate_id is not None:
            raise ValueError("A document can belong to a report or a candidate, not both")
        with self._lock:
            self._clock += timedelta(seconds=1)
            document = Document(
                id=str(uuid.uuid4()),
                storage_key=new_document.storage_key,
                original_file_name=new_document.original_file_name,
                content_type=new_document.content_type,
                size_bytes=new_document.size_bytes,
                document_type=new_document.document_type,
                verification_status=VerificationStatus.PENDING,
                uploaded_at=self._clock,
                report_id=new_document.report_id,
                candidate_id=new_document.candidate_id,
            )
            self._documents[document.id] = document
        return document

    def find_by_id(self, document_id: str) -> Document | None:
        with self._lock:
            return self._documents.get(document_id)

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
        with self._lock:
            current = self._documents.get(document_id)
            if current is None:
                return None
            if expected_status is not None and current.verification_status != expected_status:
                return None
            updated = replace(
                current,
                verification_status=status,
                confidence_score=confidence_score,
                analysis_summary=analysis_summary,
                detected_anomalies=list(anomalies),
                extracted_text=extracted_text,
                extracted_fields=dict(extracted_fields or {}),
            )
            self._documents[document_id] = updated
            return updated

    def update_status(
        self,
        document_id: str,
        status: VerificationStatus,
        comment: str | None = None,
    ) -> Document | None:
        with self._lock:
            current = self._documents.get(document_id)
            if current is None:
                return None
            updated = replace(
                current,
                verification_status=status,
                analysis_summary=comment or current.analysis_summary,
            )
            self._documents[document_id] = updated
            return updated

    def list_by_report(self, report_id: str) -> list[Document]:
        return self._sorted(lambda d: d.report_id == report_id, newest_first=True)

    def list_by_candidate(self, candidate_id: str) -> list[Document]:
        return self._sorted(lambda d: d.candidate_id == candidate_id, newest_first=True)

    def list_pending_or_under_review(self) -> list[Document]:
        waiting = (VerificationStatus.PENDING, VerificationStatus.UNDER_REVIEW)
        return self._sorted(lambda d: d.verification_status in waiting, newest_first=False)

    def delete(self, document_id: str) -> DeleteOutcome:
        with self._lock:
            document = self._documents.pop(document_id, None)
        if document is None:
            return DeleteOutcome(deleted=False)
        warnings = []
        if not self._blob_store.delete(document.storage_key):
            warnings.append(f"Blob {document.storage_key} was already missing")
        return DeleteOutcome(deleted=True, warnings=warnings)

    def _sorted(self, predicate, newest_first: bool) -> list[Document]:
        with self._lock:
            matching = [d for d in self._documents.values() if predicate(d)]
        return sorted(matching, key=lambda d: d.uploaded_at, reverse=newest_first)


@pytest.fixture()
def doc_repo(blob_store: LocalBlobStore) -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository(blob_store)


@pytest.fixture()
def make_pdf():
    """Build a PDF from text lines, optionally with a Creator entry."""
    return _make_pdf


@pytest.fixture()
def make_jpeg():
    """Build a JPEG with optional EXIF tags, COM comment and noise pixels."""
    return _make_jpeg
