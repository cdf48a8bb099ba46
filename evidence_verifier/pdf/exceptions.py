class PdfExtractionError(Exception):
    """Raised when text or metadata cannot be read from a PDF."""
