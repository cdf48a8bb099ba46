import pymupdf

from evidence_verifier.pdf.base import BasePdfExtractor
from evidence_verifier.pdf.exceptions import PdfExtractionError

_INFO_KEYS = {
    "creationDate": "created",
    "modDate": "modified",
    "creator": "creator",
    "producer": "producer",
}


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads PDFs using PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc

    def extract_metadata(self, pdf_bytes: bytes) -> dict[str, str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                info = dict(doc.metadata or {})
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf metadata read failed: {exc}") from exc

        return {key: str(info[source]) for source, key in _INFO_KEYS.items() if info.get(source)}
