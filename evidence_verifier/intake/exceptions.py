class IntakeError(Exception):
    """Base exception for rejected submissions."""


class ValidationError(IntakeError):
    """Raised when an upload is rejected before anything is written."""
