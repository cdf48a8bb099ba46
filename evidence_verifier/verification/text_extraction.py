import io
import re

from PIL import Image, UnidentifiedImageError

from evidence_verifier.logging.logger import Log
from evidence_verifier.pdf.base import BasePdfExtractor
from evidence_verifier.verification.metadata import is_image, is_pdf

# EXIF tag numbers
_EXIF_IFD = 0x8769
_TAG_IMAGE_DESCRIPTION = 270
_TAG_USER_COMMENT = 37510

# UserComment starts with an 8-byte character code
_USER_COMMENT_CODES = {
    b"ASCII\x00\x00\x00": "ascii",
    b"UNICODE\x00": "utf-16",
    b"JIS\x00\x00\x00\x00\x00": "shift_jis",
    b"\x00" * 8: "utf-8",
}

_XMP_INFO_KEYS = ("xmp", "XML:com.adobe.xmp")
_XMP_TEXT_RE = re.compile(r">([^<>]+)<")

_FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    "name": re.compile(r"^\s*(?:full\s+)?name\s*[:\-]\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    "address": re.compile(
        r"^\s*(?:permanent\s+)?address\s*[:\-]\s*(.+)$", re.IGNORECASE | re.MULTILINE
    ),
    "dob": re.compile(
        r"^\s*(?:date\s+of\s+birth|dob|जन्म\s+मिति)\s*[:\-]\s*(.+)$",
        re.IGNORECASE | re.MULTILINE,
    ),
    "id_number": re.compile(
        r"^\s*(?:citizenship|id|card)\s*(?:certificate\s*)?(?:no\.?|number)\s*[:\-]?\s*([\w\-/]+)\s*$",
        re.IGNORECASE | re.MULTILINE,
    ),
}


class TextExtractor:
    """Best-effort text recovery used in place of OCR.

    PDFs go through the PDF adapter. Images contribute only the text they
    carry as metadata (EXIF captions and comments, XMP, PNG text chunks).
    Video and other formats yield no text.
    """

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        if is_pdf(file_bytes, file_name):
            return self._pdf_extractor.extract(file_bytes)
        if is_image(file_bytes, file_name):
            return extract_image_text(file_bytes, file_name)
        return ""


def extract_image_text(file_bytes: bytes, file_name: str = "") -> str:
    """Collect the textual metadata of an image. Pixel data is never scanned for text."""
    try:
        with Image.open(io.BytesIO(file_bytes)) as image:
            exif = image.getexif()
            exif_ifd = exif.get_ifd(_EXIF_IFD)
            info = dict(image.info)
            png_text = dict(getattr(image, "text", None) or {})
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        Log.debug(f"No readable image metadata in {file_name}: {exc}")
        return ""

    parts = [
        _as_text(exif.get(_TAG_IMAGE_DESCRIPTION)),
        _decode_user_comment(exif_ifd.get(_TAG_USER_COMMENT)),
        _as_text(info.get("comment")),
    ]
    for key in _XMP_INFO_KEYS:
        parts.extend(_xmp_text(info.get(key)))
    parts.extend(
        _as_text(value) for key, value in png_text.items() if key not in _XMP_INFO_KEYS
    )

    lines: list[str] = []
    for part in parts:
        if part and part not in lines:
            lines.append(part)
    return "\n".join(lines)


def _as_text(value: object) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return ""
    return value.strip("\x00 \r\n\t")


def _decode_user_comment(value: object) -> str:
    if isinstance(value, str):
        return _as_text(value)
    if not isinstance(value, bytes):
        return ""
    encoding = _USER_COMMENT_CODES.get(value[:8])
    if encoding is None:
        return _as_text(value)
    return value[8:].decode(encoding, errors="replace").strip("\x00 \r\n\t")


def _xmp_text(value: object) -> list[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return []
    return [text.strip() for text in _XMP_TEXT_RE.findall(value) if text.strip()]


def extract_identity_fields(text: str) -> dict[str, str]:
    """Pull labelled identity fields ("Name: ...", "DOB: ...") out of free text."""
    fields: dict[str, str] = {}
    for name, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(text)
        if match:
            fields[name] = match.group(1).strip()
    return fields
