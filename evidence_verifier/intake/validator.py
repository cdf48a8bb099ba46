import uuid
from dataclasses import dataclass
from pathlib import PurePath

from evidence_verifier.documents.models import DocumentType
from evidence_verifier.intake.exceptions import ValidationError

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".pdf", ".mp4", ".avi", ".mov"})


@dataclass(frozen=True)
class ValidatedUpload:
    """An upload that passed every intake check."""

    file_name: str
    extension: str
    content_type: str
    size_bytes: int
    document_type: DocumentType
    report_id: str | None
    candidate_id: str | None


class UploadValidator:
    """Checks an upload against the intake policy.

    Raises:
        ValidationError: with a user-facing message for the first failed check.
    """

    def __init__(self, max_upload_bytes: int) -> None:
        self._max_upload_bytes = max_upload_bytes

    def validate(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        document_type: str | DocumentType,
        report_id: str | None = None,
        candidate_id: str | None = None,
    ) -> ValidatedUpload:
        if not file_bytes:
            raise ValidationError("File is empty")

        # Browsers on Windows may send the full client path.
        base_name = PurePath(file_name.replace("\\", "/")).name if file_name else ""
        extension = PurePath(base_name).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"File type '{extension or base_name}' is not allowed. "
                f"Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        if len(file_bytes) > self._max_upload_bytes:
            raise ValidationError(
                f"File size {len(file_bytes)} bytes exceeds the "
                f"{self._max_upload_bytes} byte limit"
            )

        try:
            parsed_type = DocumentType(document_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown document type '{document_type}'") from exc

        if report_id and candidate_id:
            raise ValidationError("A document can belong to a report or a candidate, not both")

        return ValidatedUpload(
            file_name=base_name,
            extension=extension,
            content_type=content_type or "application/octet-stream",
            size_bytes=len(file_bytes),
            document_type=parsed_type,
            report_id=_validate_owner_id("report_id", report_id),
            candidate_id=_validate_owner_id("candidate_id", candidate_id),
        )


def _validate_owner_id(label: str, value: str | None) -> str | None:
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError as exc:
        raise ValidationError(f"{label} must be a UUID, got '{value}'") from exc
