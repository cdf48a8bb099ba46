import io
import re
from datetime import datetime

from PIL import Image, UnidentifiedImageError

from evidence_verifier.logging.logger import Log
from evidence_verifier.pdf.base import BasePdfExtractor
from evidence_verifier.pdf.exceptions import PdfExtractionError
from evidence_verifier.verification.models import FileMetadata

_PDF_DATE_RE = re.compile(r"^D:(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?")
_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

# EXIF tag numbers
_EXIF_IFD = 0x8769
_TAG_SOFTWARE = 305
_TAG_DATETIME = 306
_TAG_DATETIME_ORIGINAL = 36867
_TAG_DATETIME_DIGITIZED = 36868

_IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png")
_IMAGE_SIGNATURES = (b"\xff\xd8\xff", b"\x89PNG\r\n\x1a\n")


def is_pdf(file_bytes: bytes, file_name: str) -> bool:
    return file_name.lower().endswith(".pdf") or file_bytes.startswith(b"%PDF")


def is_image(file_bytes: bytes, file_name: str) -> bool:
    return file_name.lower().endswith(_IMAGE_SUFFIXES) or file_bytes.startswith(
        _IMAGE_SIGNATURES
    )


def parse_pdf_date(raw: str | None) -> datetime | None:
    """Parse a PDF date string such as "D:20240131093000+01'00'" (timezone ignored)."""
    if not raw:
        return None
    match = _PDF_DATE_RE.match(raw.strip())
    if match is None:
        return None
    year, month, day, hour, minute, second = (
        int(part) if part else default
        for part, default in zip(match.groups(), (1, 1, 1, 0, 0, 0))
    )
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def parse_exif_date(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw.strip("\x00 "), _EXIF_DATE_FORMAT)
    except ValueError:
        return None


class MetadataReader:
    """Reads size, timestamps and authoring software from the file content.

    PDFs are read through the configured PDF adapter, images through Pillow's
    EXIF support. Other formats only report their size.
    """

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def read(self, file_bytes: bytes, file_name: str) -> FileMetadata:
        if is_pdf(file_bytes, file_name):
            return self._read_pdf(file_bytes, file_name)
        if is_image(file_bytes, file_name):
            return self._read_image(file_bytes, file_name)
        return FileMetadata(size_bytes=len(file_bytes))

    def _read_pdf(self, file_bytes: bytes, file_name: str) -> FileMetadata:
        try:
            info = self._pdf_extractor.extract_metadata(file_bytes)
        except PdfExtractionError as exc:
            Log.debug(f"No readable PDF info in {file_name}: {exc}")
            return FileMetadata(size_bytes=len(file_bytes))
        return FileMetadata(
            size_bytes=len(file_bytes),
            created_at=parse_pdf_date(info.get("created")),
            modified_at=parse_pdf_date(info.get("modified")),
            software=info.get("creator") or info.get("producer"),
        )

    def _read_image(self, file_bytes: bytes, file_name: str) -> FileMetadata:
        try:
            with Image.open(io.BytesIO(file_bytes)) as image:
                exif = image.getexif()
                exif_ifd = exif.get_ifd(_EXIF_IFD)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
            Log.debug(f"No readable EXIF in {file_name}: {exc}")
            return FileMetadata(size_bytes=len(file_bytes))

        created_at = parse_exif_date(exif_ifd.get(_TAG_DATETIME_ORIGINAL)) or parse_exif_date(
            exif_ifd.get(_TAG_DATETIME_DIGITIZED)
        )
        software = exif.get(_TAG_SOFTWARE)
        return FileMetadata(
            size_bytes=len(file_bytes),
            created_at=created_at,
            modified_at=parse_exif_date(exif.get(_TAG_DATETIME)),
            software=str(software).strip("\x00 ") if software else None,
        )
