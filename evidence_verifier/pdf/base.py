from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF reading adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text as a single normalized string.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """

    @abstractmethod
    def extract_metadata(self, pdf_bytes: bytes) -> dict[str, str]:
        """Read the PDF info dictionary.

        Returns:
            Subset of {"created", "modified", "creator", "producer"} with raw
            PDF date strings (e.g. "D:20240101120000+00'00'") for the dates.
            Missing entries are omitted.

        Raises:
            PdfExtractionError: if the document cannot be opened.
        """
