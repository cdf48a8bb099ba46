class AnalysisError(Exception):
    """Raised when a verification stage or the engine as a whole fails."""


class AnalysisTimeoutError(AnalysisError):
    """Raised when an evaluation does not finish within the configured time."""
