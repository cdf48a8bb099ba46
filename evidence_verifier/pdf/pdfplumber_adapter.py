import io

import pdfplumber

from evidence_verifier.pdf.base import BasePdfExtractor
from evidence_verifier.pdf.exceptions import PdfExtractionError

_INFO_KEYS = {
    "CreationDate": "created",
    "ModDate": "modified",
    "Creator": "creator",
    "Producer": "producer",
}


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads PDFs using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n".join(pages).strip()
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc

    def extract_metadata(self, pdf_bytes: bytes) -> dict[str, str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                info = dict(pdf.metadata or {})
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber metadata read failed: {exc}") from exc

        metadata: dict[str, str] = {}
        for source_key, key in _INFO_KEYS.items():
            value = info.get(source_key)
            if isinstance(value, bytes):
                value = value.decode("latin-1", errors="ignore")
            if value:
                metadata[key] = str(value)
        return metadata
